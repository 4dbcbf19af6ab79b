"""
CSV Adapter

Parses delimited text into records with per-cell type inference and maps
flat records onto chart points.
"""

import re
from typing import Any, Dict, List, Optional, Sequence

from ..core.config import settings
from ..models.mapping import ChartDataPoint, DataType, MappingConfig, RowErrorPolicy, ValidationResult
from ..services.type_detector import detect_column_type
from ..utils import coerce_number, is_null, is_number, parse_date, parse_float, strip_number_symbols
from .base import BaseAdapter

CONFIDENCE_THRESHOLD = 0.7
MAX_DISPLAY_VALUES = 3
HIGH_CONFIDENCE = 0.9

_DATE_LIKE = re.compile(r"\d{4}-\d{2}-\d{2}|\d{1,2}/\d{1,2}/\d{4}")


class CsvAdapter(BaseAdapter):
    """Adapter for delimited text and the flat records parsed from it."""

    kind = "csv"

    def __init__(self, delimiter: str = ",", row_error_policy: Optional[RowErrorPolicy] = None):
        super().__init__(row_error_policy)
        self.delimiter = delimiter

    def parse(self, text: str, has_header: bool = True, skip_empty_lines: bool = True) -> List[Dict[str, Any]]:
        """Parse ``text`` with this adapter's delimiter."""
        return self.parse_csv(text, delimiter=self.delimiter, has_header=has_header,
                              skip_empty_lines=skip_empty_lines)

    def transform(self, records: Sequence[Dict[str, Any]], config: MappingConfig) -> List[ChartDataPoint]:
        points = self._extract_points(records, config)
        self.logger.info("transform: %d points from %d records", len(points), len(records))
        return points

    def validate(self, records: Any) -> ValidationResult:
        base = super().validate(records)
        if not base.is_valid or len(records) == 0:
            return base

        errors = list(base.errors)
        warnings = list(base.warnings)
        fields = list(records[0].keys())

        if any(not str(field).strip() for field in fields):
            warnings.append("Found empty column names, which may break field mapping")

        sample = records[:settings.TYPE_SAMPLE_SIZE]
        for field in fields:
            values = [
                row.get(field) for row in sample
                if isinstance(row, dict) and not is_null(row.get(field))
            ]
            if not values:
                continue

            type_info = detect_column_type(values)
            if type_info.confidence < CONFIDENCE_THRESHOLD:
                warnings.append(f'Column "{field}" has inconsistent value types and may need manual cleanup')

            if type_info.type == DataType.NUMBER:
                invalid = [v for v in values if not self._is_parsable_number(v)]
                if invalid:
                    shown = ", ".join(str(v) for v in invalid[:MAX_DISPLAY_VALUES])
                    more = "..." if len(invalid) > MAX_DISPLAY_VALUES else ""
                    warnings.append(f'Numeric column "{field}" contains unparsable values: {shown}{more}')

        return ValidationResult(
            is_valid=True,
            errors=errors,
            warnings=warnings,
            confidence=min(base.confidence, HIGH_CONFIDENCE),
        )

    @staticmethod
    def _is_parsable_number(value: Any) -> bool:
        if isinstance(value, bool) or is_number(value):
            return True
        if isinstance(value, str):
            return parse_float(strip_number_symbols(value)) is not None
        return False

    # ─── Parsing ────────────────────────────────────────────────────

    @classmethod
    def parse_csv(
        cls,
        text: str,
        delimiter: str = ",",
        has_header: bool = True,
        skip_empty_lines: bool = True,
    ) -> List[Dict[str, Any]]:
        """
        Parse CSV text into a list of dicts.

        Quoted cells may contain the delimiter and ``""`` escapes a quote.
        Without a header, columns are named ``column_1``, ``column_2``...
        Cell values are inferred: booleans, numbers, dates, else strings.
        """
        lines = [line.rstrip("\r") for line in text.split("\n")]
        if skip_empty_lines:
            lines = [line for line in lines if line.strip() != ""]
        if not lines:
            return []

        if has_header:
            headers = [h.strip() for h in cls.parse_csv_line(lines[0], delimiter)]
        else:
            headers = [f"column_{i + 1}" for i in range(len(cls.parse_csv_line(lines[0], delimiter)))]

        start = 1 if has_header else 0
        records: List[Dict[str, Any]] = []
        for line in lines[start:]:
            values = cls.parse_csv_line(line, delimiter)
            row: Dict[str, Any] = {}
            for index, header in enumerate(headers):
                raw = values[index] if index < len(values) else ""
                row[header] = cls.infer_value(raw.strip())
            records.append(row)
        return records

    @staticmethod
    def parse_csv_line(line: str, delimiter: str = ",") -> List[str]:
        """Split one line, honouring double-quoted cells."""
        cells: List[str] = []
        current: List[str] = []
        in_quotes = False
        i = 0
        while i < len(line):
            char = line[i]
            if char == '"' and not in_quotes:
                in_quotes = True
            elif char == '"' and in_quotes:
                if i + 1 < len(line) and line[i + 1] == '"':
                    current.append('"')
                    i += 1
                else:
                    in_quotes = False
            elif char == delimiter and not in_quotes:
                cells.append("".join(current))
                current = []
            else:
                current.append(char)
            i += 1
        cells.append("".join(current))
        return cells

    @staticmethod
    def infer_value(value: str) -> Any:
        """Infer the type of a single trimmed cell."""
        if value == "":
            return None

        lowered = value.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False

        number = coerce_number(strip_number_symbols(value))
        if number is not None:
            return int(number) if number.is_integer() and abs(number) < 2 ** 53 else number

        if _DATE_LIKE.search(value):
            parsed = parse_date(value)
            if parsed is not None:
                return parsed

        return value
