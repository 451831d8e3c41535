import enum

from sqlalchemy import Boolean, Column, Enum, Integer, String

from ribbon.platform.db.base import BaseModel


class LinkResponse(str, enum.Enum):
    unset = "unset"
    accept = "accept"
    decline = "decline"


class Link(BaseModel):
    """
    One shareable "be mine" link.

    Identity fields are written once at creation. `response` starts as
    `unset` and is changed once by the recipient.
    """

    __tablename__ = "links"

    slug = Column(String(16), unique=True, nullable=False, index=True)
    recipient_name = Column(String(50), nullable=False)
    creator_name = Column(String(50), nullable=False)
    theme_id = Column(Integer, nullable=False, default=1)
    icon_url = Column(String(500), nullable=True)
    is_anonymous = Column(Boolean, nullable=False, default=False)
    response = Column(
        Enum(LinkResponse, name="link_response", native_enum=False),
        nullable=False,
        default=LinkResponse.unset,
        server_default=LinkResponse.unset.value,
    )
