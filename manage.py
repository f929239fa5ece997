"""
Command-line administration for the EduLink API.

Examples:
  python manage.py serve --port 8000
  python manage.py create-admin -e admin@example.com -p secret123 -n Admin
"""
import argparse
import sys
from typing import Optional

from sqlmodel import Session, select

from config import Settings, get_settings
from db import build_engine, create_db_and_tables
from models import Account, Role, Status
from security import MIN_PASSWORD_LENGTH, hash_password


def create_admin(settings: Settings, email: str, password: str, name: str) -> Optional[Account]:
    """
    Create a verified admin account. Admins cannot register through the
    API. Returns None when the e-mail is taken.
    """
    engine = build_engine(settings.DATABASE_URL)
    create_db_and_tables(engine)
    email = email.strip().lower()

    with Session(engine) as session:
        if session.exec(select(Account).where(Account.email == email)).first():
            print(f"Email already in use: {email}", file=sys.stderr)
            return None

        admin = Account(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=Role.ADMIN.value,
            status=Status.VERIFIED.value,
        )
        session.add(admin)
        session.commit()
        session.refresh(admin)

    print(f"Admin account created: {email}")
    return admin


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="EduLink administration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="run the API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")

    admin = commands.add_parser("create-admin", help="create an admin account")
    admin.add_argument("-e", "--email", required=True)
    admin.add_argument("-p", "--password", required=True)
    admin.add_argument("-n", "--name", default="Administrator")

    args = parser.parse_args(argv)

    if args.command == "serve":
        import uvicorn

        uvicorn.run(
            "main:create_app",
            factory=True,
            host=args.host,
            port=args.port,
            reload=args.reload,
        )
        return 0

    if len(args.password) < MIN_PASSWORD_LENGTH:
        parser.error(f"password must be at least {MIN_PASSWORD_LENGTH} characters")
    created = create_admin(get_settings(), args.email, args.password, args.name)
    return 0 if created is not None else 1


if __name__ == "__main__":
    sys.exit(main())
