import re
from functools import wraps
from flask import session, jsonify
from datetime import datetime

TRUE_VALUES = ('true', '1', 'yes', 'y')
FALSE_VALUES = ('false', '0', 'no', 'n')

def admin_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not session.get('admin'):
            return jsonify({'error': 'Admin login required'}), 401
        return f(*args, **kwargs)
    return wrapper

def parse_date_safe(s):
    if not s:
        return None
    s = s.strip()
    if not s:
        return None
    for fmt in ("%Y-%m-%d", "%d/%m/%Y", "%d/%m/%y"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None

def parse_int_safe(s):
    """Whole numbers only; '7', ' 7 ' and '-1' parse, '7.5' and 'abc' return None."""
    if s is None:
        return None
    if isinstance(s, int):
        return s
    s = str(s).strip()
    if re.fullmatch(r'[+-]?\d+', s):
        return int(s)
    return None

def parse_bool(s, default=None):
    if s is None or s == '':
        return default
    if isinstance(s, bool):
        return s
    value = str(s).strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    return default

def slugify(s):
    return re.sub(r'[^a-z0-9]+', '-', (s or '').lower()).strip('-')
