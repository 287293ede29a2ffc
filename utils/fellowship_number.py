# utils/fellowship_number.py

import re
from typing import Optional

from sqlalchemy.orm import Session

FIRST_FELLOWSHIP_NUMBER = "AAA001"
_PATTERN = re.compile(r"^([A-Z]{3})(\d{3})$")


def next_fellowship_number(last: Optional[str]) -> str:
    """
    AAA001 -> AAA002 ... AAA999 -> AAB001 ... AZZ999 -> BAA001.
    Anything unparseable restarts the sequence.
    """
    if not last:
        return FIRST_FELLOWSHIP_NUMBER
    match = _PATTERN.match(last)
    if not match:
        return FIRST_FELLOWSHIP_NUMBER

    letters, digits = list(match.group(1)), int(match.group(2))
    if digits < 999:
        return f"{''.join(letters)}{digits + 1:03d}"

    for i in range(2, -1, -1):
        if letters[i] == "Z":
            letters[i] = "A"
            continue
        letters[i] = chr(ord(letters[i]) + 1)
        break
    return f"{''.join(letters)}001"


def generate_fellowship_number(db: Session) -> str:
    from api.members.members_model import Member

    last = (
        db.query(Member.fellowship_number)
        .order_by(Member.fellowship_number.desc())
        .first()
    )
    return next_fellowship_number(last[0] if last else None)
