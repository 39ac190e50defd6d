"""Merge inferred values into the collaborator's record draft.

The rules the form layer must follow:
- A found value replaces whatever the draft held
- A missing value never clears what the draft already has
- The raw transcript fills work_details only while it is blank
"""

from agrivoice.inference.models import InferredFields, RecordDraft


def apply_inferred(draft: RecordDraft, fields: InferredFields) -> RecordDraft:
    """Return a new draft with the inferred fields merged in."""
    update: dict[str, str] = fields.matched()
    if not draft.work_details.strip():
        update["work_details"] = fields.raw_text
    return draft.model_copy(update=update)


def apply_field_suggestion(draft: RecordDraft, suggestion: str | None) -> RecordDraft:
    """Pre-fill field_name from a location suggestion, if there is one."""
    if suggestion is None:
        return draft
    return draft.model_copy(update={"field_name": suggestion})
