from .type_detector import detect_column_type, detect_data_type
from .field_analyzer import analyze_field, suggest_role, FieldCharacteristics
from .mapping_suggester import suggest_mapping, suggest_best_mapping
from .chart_suggester import suggest_chart_type, classify_fields

__all__ = [
    "detect_column_type",
    "detect_data_type",
    "analyze_field",
    "suggest_role",
    "FieldCharacteristics",
    "suggest_mapping",
    "suggest_best_mapping",
    "suggest_chart_type",
    "classify_fields",
]
