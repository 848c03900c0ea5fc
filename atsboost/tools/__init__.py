"""
External tool wrappers for ATSBoost.

- pdf_parser / docx_parser / documents: CV text extraction
- ai_analyzer: DeepSeek CV analysis
- email: SendGrid transactional email
- whatsapp: Twilio WhatsApp messaging
- payfast: PayFast checkout and ITN verification
"""

from atsboost.tools.documents import extract_cv_text
from atsboost.tools.docx_parser import parse_docx
from atsboost.tools.pdf_parser import parse_pdf

__all__ = ["parse_pdf", "parse_docx", "extract_cv_text"]
