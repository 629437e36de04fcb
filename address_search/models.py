from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class SearchQuery(BaseModel):
    text: str
    allowed_cities: List[str] = Field(default_factory=list)
    limit: int = Field(default=5, ge=1)
    country_codes: str = "de"


class AddressDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    street: str = ""
    house_number: str = Field(default="", alias="houseNumber")
    postal_code: str = Field(default="", alias="postalCode")
    city: str = ""
    district: str = ""
    state: str = ""
    country: str = ""


class AddressResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    display_name: str = Field(default="", alias="displayName")
    latitude: float
    longitude: float
    address: AddressDetails
    type: str = "unknown"
    has_road: bool = Field(default=False, alias="hasRoad")


class AddressList(BaseModel):
    addresses: List[AddressResult]


class SearchResponse(BaseModel):
    success: bool = True
    data: AddressList


class ReverseGeocodeData(BaseModel):
    address: AddressResult


class ReverseGeocodeResponse(BaseModel):
    success: bool = True
    data: Optional[ReverseGeocodeData] = None
    message: Optional[str] = None
