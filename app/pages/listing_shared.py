"""Shared helpers for rendering filtered record listings."""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

import gradio as gr


def _normalize_rows(table: List[List[str]], column_count: int) -> List[List[str]]:
    if not column_count:
        return table
    normalized_table: List[List[str]] = []
    for row in table:
        normalized = list(row[:column_count])
        if len(normalized) < column_count:
            normalized.extend([""] * (column_count - len(normalized)))
        normalized_table.append(normalized)
    return normalized_table


def prepare_listing(
    records: Optional[Sequence[Any]],
    *,
    column_labels: Sequence[str],
    filter_fn: Optional[Callable[[Any], bool]],
    row_fn: Callable[[Any], List[str]],
    dropdown_label: Callable[[Any], str],
    empty_message: str,
    found_message: Union[str, Callable[[int], str]] = "OK: {count} record(s) found.",
) -> Tuple[Any, List[Any], Any, str, Optional[str]]:
    """Normalize shared outputs for list views.

    Applies the filter, renders the table rows and prepares the dropdown used
    to pick a record for an action (download, delete). Returns the table
    update, the filtered records, the dropdown update, the feedback message
    and the default selected id.
    """

    entries = list(records or [])
    if filter_fn:
        filtered = [record for record in entries if filter_fn(record)]
    else:
        filtered = entries

    table = _normalize_rows([row_fn(record) for record in filtered], len(column_labels))

    dropdown_choices: List[Tuple[str, Any]] = []
    for record in filtered:
        value = getattr(record, "id", None)
        if not value:
            continue
        dropdown_choices.append((dropdown_label(record), value))

    default_value = dropdown_choices[0][1] if dropdown_choices else None

    if filtered:
        if callable(found_message):
            message = str(found_message(len(filtered)))
        else:
            message = str(found_message).format(count=len(filtered))
    else:
        message = empty_message

    table_update = gr.update(value=table)
    dropdown_update = gr.update(choices=dropdown_choices, value=default_value)

    return table_update, filtered, dropdown_update, message, default_value


__all__ = ["prepare_listing"]
