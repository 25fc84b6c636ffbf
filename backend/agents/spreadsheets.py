"""
Excel parsing for the agent and score imports.

Only the first worksheet is read. The first row is the header and every
following row is data.
"""
import math
import re
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

EMAIL_REGEX = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

AGENT_HEADERS = {
    'name': ('nama lengkap', 'nama', 'name'),
    'email': ('email',),
    'category': ('kategori', 'category'),
    'password': ('password',),
}

SCORE_HEADERS = {
    'qa_score': ('qascore', 'qa score', 'qa_score'),
    'quiz_score': ('quizscore', 'quiz score', 'quiz_score'),
    'typing_test_score': ('typingtestscore', 'typing test score', 'typing_test_score', 'typingtest'),
    'afrt': ('afrt',),
    'art': ('art',),
    'rt': ('rt',),
    'rr': ('rr',),
    'csat': ('csat',),
}

# Remarks columns are keyed by the compact score name, e.g. "remarks qascore"
REMARK_KEYS = {
    'qa_score': 'qascore',
    'quiz_score': 'quizscore',
    'typing_test_score': 'typingtestscore',
    'afrt': 'afrt',
    'art': 'art',
    'rt': 'rt',
    'rr': 'rr',
    'csat': 'csat',
}


class SpreadsheetError(Exception):
    """The workbook cannot be imported at all; the message is user facing"""


def read_rows(file):
    """Header and data rows of the first worksheet"""
    try:
        workbook = load_workbook(file, read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError) as e:
        raise SpreadsheetError(f'File Excel tidak dapat dibaca: {e}')

    try:
        worksheet = workbook.worksheets[0]
        rows = [list(row) for row in worksheet.iter_rows(values_only=True)]
    finally:
        workbook.close()

    if len(rows) < 2:
        raise SpreadsheetError('File Excel harus memiliki header dan minimal 1 baris data')

    header = [value.strip().lower() if isinstance(value, str) else '' for value in rows[0]]
    return header, rows[1:]


def find_header(header, aliases, compact=False):
    """Index of the first header matching one of ``aliases``, or -1"""
    def normalize(value):
        return re.sub(r'[\s_]', '', value) if compact else value

    targets = {normalize(alias.lower()) for alias in aliases}
    for index, value in enumerate(header):
        if normalize(value) in targets:
            return index
    return -1


def cell_text(row, index):
    """Trimmed string of a cell, None when blank or the column is absent"""
    if index < 0 or index >= len(row):
        return None
    value = row[index]
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def parse_score(value):
    """Non-negative finite number, 0 for anything else"""
    if value is None:
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number) or number < 0:
        return 0
    return number


def parse_agent_rows(file):
    """
    Rows of the agent import as dicts with name, email, category, password.

    Rows missing a name, email or password are skipped.
    """
    header, data = read_rows(file)

    name_index = find_header(header, AGENT_HEADERS['name'])
    email_index = find_header(header, AGENT_HEADERS['email'])
    category_index = find_header(header, AGENT_HEADERS['category'])
    password_index = find_header(header, AGENT_HEADERS['password'])

    if name_index == -1:
        raise SpreadsheetError('Kolom "Nama Lengkap" tidak ditemukan di file Excel')
    if email_index == -1:
        raise SpreadsheetError('Kolom "Email" tidak ditemukan di file Excel')
    if password_index == -1:
        raise SpreadsheetError('Kolom "Password" tidak ditemukan di file Excel')

    rows = []
    for row in data:
        name = cell_text(row, name_index)
        email = cell_text(row, email_index)
        password = cell_text(row, password_index)
        if not name or not email or not password:
            continue
        rows.append({
            'name': name,
            'email': email,
            'category': cell_text(row, category_index) or 'socialMedia',
            'password': password,
        })

    if not rows:
        raise SpreadsheetError('Tidak ada data yang valid di file Excel')
    return rows


def parse_score_rows(file):
    """
    Rows of the score import: the agent name plus every score and remark.

    Headers are compared after removing spaces and underscores. A missing
    score cell counts as 0.
    """
    header, data = read_rows(file)

    name_index = find_header(header, ('nama', 'name'), compact=True)
    if name_index == -1:
        raise SpreadsheetError('Kolom "nama" tidak ditemukan di file Excel')

    score_indexes = {
        field: find_header(header, aliases, compact=True)
        for field, aliases in SCORE_HEADERS.items()
    }
    if all(index == -1 for index in score_indexes.values()):
        raise SpreadsheetError(
            'Minimal satu kolom nilai (qascore, quizscore, typingtestscore, afrt, art, rt, rr, atau csat) harus ada'
        )

    remark_indexes = {
        field: find_header(header, (f'remarks {key}', f'{key} remarks'), compact=True)
        for field, key in REMARK_KEYS.items()
    }

    rows = []
    for row in data:
        name = cell_text(row, name_index)
        if not name:
            continue
        parsed = {'name': name}
        for field, index in score_indexes.items():
            raw = row[index] if 0 <= index < len(row) else None
            parsed[field] = parse_score(raw)
            parsed[f'{field}_remarks'] = cell_text(row, remark_indexes[field])
        rows.append(parsed)

    if not rows:
        raise SpreadsheetError('Tidak ada data yang valid di file Excel')
    return rows
