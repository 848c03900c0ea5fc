"""Text helpers for CV content."""

import hashlib


def truncate_cv(cv_text: str, max_chars: int = 6000) -> str:
    """
    Truncate CV to essential sections for token efficiency.

    Keeps: Skills, Experience, Education, Qualifications sections
    Removes: References, declarations, personal particulars
    """
    if len(cv_text) <= max_chars:
        return cv_text

    lines = cv_text.split('\n')
    essential_lines = []
    in_section = False
    skip_sections = ['reference', 'declaration', 'id number', 'marital status']

    for line in lines:
        line_lower = line.lower().strip()

        if any(skip in line_lower for skip in skip_sections):
            in_section = False
            continue

        if any(kw in line_lower for kw in ['skill', 'experience', 'education', 'qualification', 'summary', 'nqf']):
            in_section = True

        if in_section or len(essential_lines) < 50:
            essential_lines.append(line)

        if len('\n'.join(essential_lines)) > max_chars:
            break

    result = '\n'.join(essential_lines)
    if len(result) > max_chars:
        result = result[:max_chars] + "\n[truncated]"

    return result


def content_hash(text: str) -> str:
    """Short stable hash of CV content, used in cache keys."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]
