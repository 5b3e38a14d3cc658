"""Exceptions raised at the configuration and storage seams.

The engine itself never raises for bad dictation input: short or
unmatched text yields ``None`` and malformed macros are skipped.
"""


class DictAssistError(Exception):
    pass


class PatternTableError(DictAssistError):
    """A keyword pattern table failed validation at load time."""


class MacroNotFoundError(DictAssistError):
    def __init__(self, macro_id):
        super().__init__(f"Macro {macro_id} not found")
        self.macro_id = macro_id


class MacroValidationError(DictAssistError):
    pass
