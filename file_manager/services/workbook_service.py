"""
Excel workbook validation, consolidation and bundling.
"""
import logging
import zipfile
from datetime import datetime
from io import BytesIO
from pathlib import PurePosixPath
from typing import Iterable, Tuple

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font

logger = logging.getLogger(__name__)

CONSOLIDATED_SHEET = 'Consolidated'

# (filename, payload) pairs
NamedPayloads = Iterable[Tuple[str, bytes]]


class WorkbookError(Exception):
    """Raised when a payload is not a usable Excel workbook."""
    pass


def _open_workbook(content: bytes):
    return load_workbook(BytesIO(content), read_only=True, data_only=True)


def validate_excel(content: bytes) -> bool:
    """
    Check that a payload parses as a workbook with at least one sheet.

    Raises:
        WorkbookError if the payload cannot be used
    """
    try:
        workbook = _open_workbook(content)
    except Exception as e:
        logger.info(f"Rejected workbook: {e}")
        raise WorkbookError('Invalid Excel file format')
    try:
        if not workbook.worksheets:
            raise WorkbookError('Excel file must contain at least one sheet')
    finally:
        workbook.close()
    return True


def _append_header(ws, header) -> None:
    ws.append(list(header))
    bold = Font(bold=True)
    for cell in ws[ws.max_row]:
        cell.font = bold


def merge_workbooks(files: NamedPayloads) -> BytesIO:
    """
    Consolidate every sheet of every workbook into one sheet.

    The first row of each source sheet is treated as its header and written
    in bold. From the second section on, a blank row and the repeated header
    separate sections. Payloads that fail to parse are skipped.

    Args:
        files: (filename, payload) pairs

    Returns:
        BytesIO: Consolidated workbook
    """
    merged = Workbook()
    merged.properties.creator = 'File Manager'
    merged.properties.created = datetime.now()
    consolidated = merged.active
    consolidated.title = CONSOLIDATED_SHEET

    wrote_header = False
    for filename, content in files:
        if not content:
            continue
        try:
            source = _open_workbook(content)
        except Exception as e:
            logger.warning(f"Skipping file during merge (unable to parse): {filename}: {e}")
            continue

        try:
            for ws in source.worksheets:
                rows = list(ws.iter_rows(values_only=True))
                if not rows:
                    continue
                if wrote_header:
                    consolidated.append([])
                _append_header(consolidated, rows[0])
                wrote_header = True
                for row in rows[1:]:
                    consolidated.append(list(row))
        finally:
            source.close()

    output = BytesIO()
    merged.save(output)
    output.seek(0)
    return output


def _unique_name(filename: str, used: set) -> str:
    name = PurePosixPath(filename or '').name or 'file.xlsx'
    if name not in used:
        return name
    path = PurePosixPath(name)
    counter = 2
    while f"{path.stem} ({counter}){path.suffix}" in used:
        counter += 1
    return f"{path.stem} ({counter}){path.suffix}"


def zip_files(files: NamedPayloads) -> BytesIO:
    """
    Bundle payloads into a DEFLATE zip under their filenames.

    Duplicate filenames get a " (n)" suffix.

    Returns:
        BytesIO: Zip archive
    """
    output = BytesIO()
    used: set = set()
    with zipfile.ZipFile(output, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
        for filename, content in files:
            if not content:
                continue
            name = _unique_name(filename, used)
            used.add(name)
            archive.writestr(name, content)
    output.seek(0)
    return output
