# Import every model so SQLAlchemy can resolve string relationships
from archivo.models import (  # noqa: F401
    user,
    family_relation,
    media,
    media_tag,
    album,
    album_member,
    memory,
)
