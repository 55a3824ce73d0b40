from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List, Literal
from datetime import datetime
import uuid

EntryType = Literal['vendor', 'agency', 'inhouse', 'document']
VendorStatus = Literal['pending', 'approved', 'rejected', 'in-discussion']


class DocumentLinkModel(BaseModel):
    name: Optional[str] = None
    url: str = Field(min_length=1)
    uploaded_at: datetime = Field(default_factory=datetime.now, alias="uploadedAt")

    model_config = ConfigDict(populate_by_name=True)


class ProjectVendorModel(BaseModel):
    """A vendor, agency or in-house quote (or a plain document) attached to a project."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    project_id: str = Field(alias="project")
    entry_type: EntryType = Field(default='vendor', alias="entryType")

    vendor_name: Optional[str] = Field(default=None, alias="vendorName")
    agency_name: Optional[str] = Field(default=None, alias="agencyName")
    contact_person: Optional[str] = Field(default=None, alias="contactPerson")
    contact_email: Optional[str] = Field(default=None, alias="contactEmail")
    contact_phone: Optional[str] = Field(default=None, alias="contactPhone")

    quote: Optional[float] = None
    document_links: List[DocumentLinkModel] = Field(default_factory=list, alias="documentLinks")
    notes: Optional[str] = None
    status: VendorStatus = 'pending'

    added_by: str = Field(alias="addedBy")  # user_id (Set by backend)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(populate_by_name=True)


class ProjectVendorCreateModel(BaseModel):
    project_id: str = Field(alias="project", min_length=1)
    entry_type: Optional[EntryType] = Field(default=None, alias="entryType")
    vendor_name: Optional[str] = Field(default=None, alias="vendorName")
    agency_name: Optional[str] = Field(default=None, alias="agencyName")
    contact_person: Optional[str] = Field(default=None, alias="contactPerson")
    contact_email: Optional[str] = Field(default=None, alias="contactEmail")
    contact_phone: Optional[str] = Field(default=None, alias="contactPhone")
    quote: Optional[float] = None
    document_links: Optional[List[DocumentLinkModel]] = Field(default=None, alias="documentLinks")
    notes: Optional[str] = None
    status: Optional[VendorStatus] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ProjectVendorUpdateModel(BaseModel):
    """
    Contact fields, quote and notes are replaced whenever sent, null included.
    entryType, status and documentLinks only change when given a non-empty value.
    """
    entry_type: Optional[EntryType] = Field(default=None, alias="entryType")
    vendor_name: Optional[str] = Field(default=None, alias="vendorName")
    agency_name: Optional[str] = Field(default=None, alias="agencyName")
    contact_person: Optional[str] = Field(default=None, alias="contactPerson")
    contact_email: Optional[str] = Field(default=None, alias="contactEmail")
    contact_phone: Optional[str] = Field(default=None, alias="contactPhone")
    quote: Optional[float] = None
    document_links: Optional[List[DocumentLinkModel]] = Field(default=None, alias="documentLinks")
    notes: Optional[str] = None
    status: Optional[VendorStatus] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator('entry_type', 'status', 'document_links', mode='before')
    @classmethod
    def empty_to_none(cls, v):
        if not v:
            return None
        return v
