# eva/dependencies/db.py
from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from eva.db.session import get_db

DbDep = Annotated[Session, Depends(get_db)]
