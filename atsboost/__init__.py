"""
ATSBoost Backend.

Core components:
- services: ATS scoring, job matching, premium matching, payments, plans
- tools: document parsers, AI analyser, email, WhatsApp, PayFast
- db: SQLAlchemy models and session management
- api: FastAPI application and routes
"""
