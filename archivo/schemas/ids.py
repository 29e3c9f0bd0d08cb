from typing import Annotated, Optional

from fastapi import Form, Path, Query
from pydantic import Field

from archivo.database import MAX_DB_ID

# Request bodies
DbId = Annotated[int, Field(gt=0, le=MAX_DB_ID)]

# Route parameters
IdPath = Annotated[int, Path(gt=0, le=MAX_DB_ID)]
IdQuery = Annotated[Optional[int], Query(gt=0, le=MAX_DB_ID)]
IdForm = Annotated[Optional[int], Form(gt=0, le=MAX_DB_ID)]
