from .validator import DuplicateChecker, RecordValidator, is_blank, today_in

__all__ = ["DuplicateChecker", "RecordValidator", "is_blank", "today_in"]
