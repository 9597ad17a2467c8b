"""
Pydantic models for extracted manifest data and API request/response schemas.
"""
from typing import Optional, List, Dict, Any, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime


Number = Union[int, float, str]


class ImageData(BaseModel):
    """One page image ready to be sent to the model (a raw uploaded document or a rasterized PDF page)."""
    model_config = ConfigDict(populate_by_name=True)

    base64: str = Field(..., description="Base64 payload without the data-URL prefix")
    mime_type: str = Field(..., alias='mimeType')
    file_name: str = Field('', alias='fileName')
    page_number: Optional[int] = Field(None, alias='pageNumber')


class ExtractedField(BaseModel):
    """Generic form field."""
    topic: str
    answer: Optional[str] = None


class ExtractedSection(BaseModel):
    """Generic group of fields under a title."""
    title: str
    fields: List[ExtractedField] = Field(default_factory=list)


class _OcrRecord(BaseModel):
    """Base for records filled from model output; every field may fail to OCR."""
    model_config = ConfigDict(populate_by_name=True)

    @field_validator('*', mode='before')
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class MMRHeader(_OcrRecord):
    """Header block of a waste manifest."""
    mmr_no: Optional[str] = Field(None, alias='mmrNo')
    date: Optional[str] = Field(None, alias='data')
    generator: Optional[str] = Field(None, alias='gerador')
    carrier: Optional[str] = Field(None, alias='transportador')
    base_location: Optional[str] = Field(None, alias='baseDeApoio')
    activity: Optional[str] = Field(None, alias='atividade')
    basin: Optional[str] = Field(None, alias='bacia')
    well: Optional[str] = Field(None, alias='poco')
    project: Optional[str] = Field(None, alias='projeto')

    @field_validator('*', mode='before')
    @classmethod
    def _scalar_to_str(cls, value):
        if isinstance(value, (bool, int, float)):
            return str(value)
        return value


class MMRWasteItem(_OcrRecord):
    """One row of the waste table."""
    item_id: Optional[str] = Field(None, alias='item')
    code: Optional[str] = Field(None, alias='codigo')
    waste_type: Optional[str] = Field(None, alias='tipoDeResiduo')
    description: Optional[str] = Field(None, alias='descricao')
    packaging: Optional[str] = Field(None, alias='acondicionamento')
    quantity: Optional[Number] = Field(None, alias='quantidade')
    unit: Optional[str] = Field(None, alias='unidade')
    weight_kg: Optional[Number] = Field(None, alias='pesoKg')
    nbr_class: Optional[str] = Field(None, alias='classeNbr')
    mtr: Optional[str] = Field(None, alias='mtr')

    @field_validator('item_id', 'code', 'waste_type', 'description', 'packaging', 'unit', 'nbr_class', 'mtr', mode='before')
    @classmethod
    def _scalar_to_str(cls, value):
        if isinstance(value, (bool, int, float)):
            return str(value)
        return value


class FullExtractedData(BaseModel):
    """Typed extraction result: header plus waste items."""
    header: MMRHeader = Field(default_factory=MMRHeader)
    items: List[MMRWasteItem] = Field(default_factory=list)


class AnalyzeRequest(BaseModel):
    """Request body for the model proxy endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    image_datas: Optional[List[ImageData]] = Field(None, alias='imageDatas')
    prompt_text: Optional[str] = Field(None, alias='promptText')


class AnalyzeResponse(BaseModel):
    """Raw model text."""
    text: str


class ErrorResponse(BaseModel):
    """Error body returned by the model proxy endpoint."""
    error: str


class DocumentInfo(BaseModel):
    """Page summary returned to the client (payload omitted)."""
    file_name: str
    mime_type: str
    page_number: Optional[int] = None
    size_bytes: int


class SessionState(BaseModel):
    """Current state of an extraction session."""
    session_id: str
    file_name: Optional[str] = None
    documents: List[DocumentInfo] = Field(default_factory=list)
    is_loading: bool = False
    error: Optional[str] = None
    extracted_data: Optional[FullExtractedData] = None
    sections: List[ExtractedSection] = Field(default_factory=list)
    dropped_fragments: int = 0
    updated_at: datetime


class RotateRequest(BaseModel):
    """Rotate one page of the selected document."""
    degrees: int = Field(..., description="Multiple of 90, positive is clockwise")
    page_number: int = Field(1, ge=1)


class UsageStats(BaseModel):
    """Usage counters."""
    documents_processed: int
    minutes_saved: int


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: datetime
    provider: str
    details: Dict[str, Any] = Field(default_factory=dict)
