import io
import logging
import pandas
from app.core.errors import ValidationError

logger = logging.getLogger(__name__)

# header (lowercased, spaces removed) -> import record key
COLUMN_ALIASES = {
    "title": "title",
    "bookname": "title",
    "author": "author",
    "booknumber": "bookNumber",
    "barcode": "bookNumber",
    "categoryname": "categoryName",
    "category": "categoryName",
}


def _normalise(header: object) -> str:
    return "".join(str(header).lower().split())


def read_workbook(content: bytes) -> list[dict]:
    """Turn every sheet of an .xlsx workbook into bulk-import records.

    Unknown columns are ignored and blank cells are left out of the record.
    """
    try:
        sheets = pandas.read_excel(io.BytesIO(content), sheet_name=None, dtype=str, engine="openpyxl")
    except Exception as exc:
        raise ValidationError("Could not read the Excel file.", details=str(exc)) from exc

    records: list[dict] = []
    for sheet_name, frame in sheets.items():
        columns: dict = {}
        for column in frame.columns:
            key = COLUMN_ALIASES.get(_normalise(column))
            # first matching header wins
            if key and key not in columns.values():
                columns[column] = key
        if not columns:
            logger.warning("Sheet has no recognised columns", extra={"sheet": sheet_name})
            continue
        frame = frame[list(columns)].rename(columns=columns)
        for row in frame.to_dict(orient="records"):
            record = {key: value for key, value in row.items() if isinstance(value, str) and value.strip()}
            if record:
                records.append(record)
    logger.info("Workbook parsed", extra={"sheets": list(sheets), "records": len(records)})
    return records
