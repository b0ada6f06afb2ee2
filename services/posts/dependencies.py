"""FastAPI dependencies for Post Service."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from services.posts.database import get_db

# Type aliases for cleaner dependency injection
DBSession = Annotated[Session, Depends(get_db)]
