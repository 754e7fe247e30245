from pydantic import BaseModel, Field


class SkippedRow(BaseModel):
    index: int
    reason: str


class ImportResult(BaseModel):
    processed: int = 0
    skipped: int = 0
    total: int = 0
    skipped_rows: list[SkippedRow] = Field(default_factory=list, alias="skippedRows")

    class Config:
        populate_by_name = True

    @property
    def message(self) -> str:
        return f"Processed {self.total} records with {self.processed} successful imports"
