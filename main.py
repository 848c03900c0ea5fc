"""
ATSBoost - CLI Entry Point.

Commands:
    serve                 run the API with uvicorn
    create-admin          create (or promote) an admin account
    seed-plans            insert the default subscription plans
    run-matching          run the premium matching engine once
    analyze <file>        print a local ATS report for a PDF/DOCX CV
"""

import argparse
import getpass
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from atsboost.config import settings  # noqa: E402


def serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("atsboost.api.app:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def create_admin(args: argparse.Namespace) -> int:
    from atsboost.db import User, init_db, session_scope
    from atsboost.services.security import hash_password

    init_db()
    with session_scope() as db:
        user = db.query(User).filter(User.email == args.email.lower()).first()
        if user:
            user.role = "admin"
            print(f"Promoted {user.email} to admin")
            return 0

        password = args.password or getpass.getpass("Password: ")
        if len(password) < 8:
            print("Error: password must be at least 8 characters")
            return 1

        db.add(
            User(
                username=args.username or args.email.split("@")[0],
                email=args.email.lower(),
                password=hash_password(password),
                name=args.name,
                role="admin",
                email_verified=True,
            )
        )
        print(f"Created admin {args.email}")
    return 0


def seed(args: argparse.Namespace) -> int:
    from atsboost.db import init_db, session_scope
    from atsboost.services.plan_features import seed_plans

    init_db()
    with session_scope() as db:
        created = seed_plans(db)
        print(f"Seeded {len(created)} plan(s)")
    return 0


def run_matching(args: argparse.Namespace) -> int:
    from atsboost.db import init_db, session_scope
    from atsboost.services.premium_matching import run_matching_engine

    init_db()
    with session_scope() as db:
        created = run_matching_engine(db)
        print(f"Created {created} new premium match(es)")
    return 0


def analyze(args: argparse.Namespace) -> int:
    from atsboost.services.ats_scoring import analyze_cv, analyze_job_fit
    from atsboost.tools.documents import extract_cv_text_from_path
    from atsboost.tools.errors import DocumentParseError, UnsupportedFileType

    path = Path(args.file)
    if not path.exists():
        print(f"Not found: {path}")
        return 1

    try:
        cv_text = extract_cv_text_from_path(str(path))
    except (UnsupportedFileType, DocumentParseError) as e:
        print(f"Error: {e}")
        return 1

    report = analyze_cv(cv_text, args.industry)
    print(f"ATS report for {path.name}")
    print("=" * 40)
    print(f"Score:   {report.score}/100 ({report.rating})")
    print(f"Skills:  {report.skills_score}/50")
    print(f"Context: {report.context_score}/30")
    print(f"Format:  {report.format_score}/20")
    print(f"B-BBEE:  {'yes' if report.bbbee_detected else 'no'}")
    print(f"NQF:     {', '.join(str(n) for n in report.nqf_levels) or 'none'}")

    for heading, items in (
        ("Strengths", report.strengths),
        ("Improvements", report.improvements),
        ("Formatting issues", report.issues),
        ("Keywords to add", report.keyword_recommendations),
    ):
        if items:
            print(f"\n{heading}:")
            for item in items:
                print(f"  - {item}")

    if args.job:
        job_description = Path(args.job).read_text(encoding="utf-8")
        fit = analyze_job_fit(cv_text, job_description)
        print(f"\nJob fit: {fit['score']}%")
        if fit["missing_keywords"]:
            print(f"Missing: {', '.join(fit['missing_keywords'])}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="atsboost", description="ATSBoost CV optimisation API")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("serve", help="Run the API server")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=8000)
    p.add_argument("--reload", action="store_true")
    p.set_defaults(func=serve)

    p = sub.add_parser("create-admin", help="Create or promote an admin account")
    p.add_argument("email")
    p.add_argument("--username")
    p.add_argument("--name")
    p.add_argument("--password", help="Prompted for when omitted")
    p.set_defaults(func=create_admin)

    p = sub.add_parser("seed-plans", help="Insert the default subscription plans")
    p.set_defaults(func=seed)

    p = sub.add_parser("run-matching", help="Run the premium matching engine")
    p.set_defaults(func=run_matching)

    p = sub.add_parser("analyze", help="Print an ATS report for a CV file")
    p.add_argument("file")
    p.add_argument("--industry", help="Target industry for keyword suggestions")
    p.add_argument("--job", help="Path to a job description text file")
    p.set_defaults(func=analyze)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the ATSBoost CLI."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=settings.log_level.upper())

    try:
        return args.func(args)
    except ValueError as e:
        # Raised by the database layer when DATABASE_URL is missing
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
