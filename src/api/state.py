import os
import logging
from typing import Optional

from imagery.unsplash import UnsplashImageSearch
from llm.llm_client import LLMClient
from storage.response_store import (
    GptResponseStore,
    InMemoryGptResponseStore,
    PostgresGptResponseStore,
)
from storage.task_store import InMemoryTaskStore, PostgresTaskStore, TaskStore
from storage.template_store import (
    CustomTemplateStore,
    InMemoryCustomTemplateStore,
    PostgresCustomTemplateStore,
)
from storage.user_store import InMemoryUserStore, PostgresUserStore, UserStore

logger = logging.getLogger(__name__)

USE_DATABASE = os.getenv("USE_DATABASE", "false").lower() in {"1", "true", "yes"}

# In-memory stores by default; swapped for Postgres at startup when USE_DATABASE is set
user_store: UserStore = InMemoryUserStore()
task_store: TaskStore = InMemoryTaskStore()
gpt_response_store: GptResponseStore = InMemoryGptResponseStore()
custom_template_store: CustomTemplateStore = InMemoryCustomTemplateStore()

# Built lazily so importing the app never requires provider credentials
llm_client: Optional[LLMClient] = None
image_search = UnsplashImageSearch()


def use_postgres_stores() -> None:
    global user_store, task_store, gpt_response_store, custom_template_store
    user_store = PostgresUserStore()
    task_store = PostgresTaskStore()
    gpt_response_store = PostgresGptResponseStore()
    custom_template_store = PostgresCustomTemplateStore()
    logger.info("Using PostgreSQL-backed stores")
