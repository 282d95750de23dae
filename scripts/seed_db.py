"""
Seed the database with the administrator account and weekly pregnancy content.

Safe to run repeatedly: an existing administrator is left untouched and weekly
content rows are upserted by week.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mamacita.config import get_settings
from mamacita.db import DbClient
from mamacita.enums import Role
from mamacita.security import hash_password

logger = logging.getLogger(__name__)

WEEKLY_CONTENT = {
    12: {
        "baby_size": "Seu bebê tem o tamanho de um limão 🍋",
        "baby_development": "Os reflexos começam a aparecer e as unhas estão se formando.",
        "mother_body": "Os enjoos costumam diminuir e a energia volta aos poucos.",
        "tips": "Mantenha o pré-natal em dia e continue com o ácido fólico.",
        "checklist": ["Agendar ultrassom morfológico do 1º trimestre", "Contar a novidade à família"],
    },
    20: {
        "baby_size": "Seu bebê tem o tamanho de uma banana 🍌",
        "baby_development": "Seu bebê já consegue ouvir sons e engolir líquido amniótico.",
        "mother_body": "Você pode começar a sentir os primeiros movimentos do bebê.",
        "tips": "Use roupas confortáveis e hidrate a pele da barriga.",
        "checklist": ["Agendar ultrassom morfológico", "Pesquisar sobre licença-maternidade"],
    },
    24: {
        "baby_size": "Seu bebê tem o tamanho de uma espiga de milho 🌽",
        "baby_development": (
            "Nesta semana, seu bebê está desenvolvendo padrões de sono e vigília. "
            "Os pulmões continuam a se desenvolver, formando os alvéolos que serão "
            "essenciais para a respiração após o nascimento."
        ),
        "mother_body": (
            "Você pode começar a sentir contrações de Braxton Hicks (contrações de "
            "treinamento). Seu útero está crescendo e pode estar pressionando suas costelas."
        ),
        "tips": "Faça exercícios leves como caminhada, mantenha-se hidratada e descanse sempre que possível.",
        "checklist": [
            "Agendar ultrassom morfológico",
            "Começar a pensar em nomes",
            "Pesquisar sobre cursos de parto",
        ],
    },
    32: {
        "baby_size": "Seu bebê tem o tamanho de um abacaxi 🍍",
        "baby_development": "O bebê ganha peso rapidamente e os ossos estão se fortalecendo.",
        "mother_body": "Falta de ar e azia são comuns com o útero mais alto.",
        "tips": "Faça refeições menores e mais frequentes.",
        "checklist": ["Montar a mala da maternidade", "Definir o plano de parto"],
    },
    40: {
        "baby_size": "Seu bebê tem o tamanho de uma melancia pequena 🍉",
        "baby_development": "Seu bebê está pronto para nascer!",
        "mother_body": "Fique atenta aos sinais de trabalho de parto.",
        "tips": "Descanse e mantenha o telefone da maternidade à mão.",
        "checklist": ["Conferir a mala da maternidade", "Instalar a cadeirinha no carro"],
    },
}


def seed_admin(db: DbClient, email: str, password: str, full_name: str) -> bool:
    """Create the administrator; returns False when it already exists."""
    email = email.strip().lower()
    if db.get_account_by_email(email):
        logger.info("Admin %s already exists, skipping", email)
        return False
    db.create_account(
        email=email,
        password_hash=hash_password(password),
        role=Role.ADMIN,
        profile={"full_name": full_name, "title": "super_admin"},
        is_verified=True,
    )
    logger.info("Created admin %s", email)
    return True


def seed_weekly_content(db: DbClient) -> int:
    for week, fields in sorted(WEEKLY_CONTENT.items()):
        db.upsert_weekly_content(week, fields)
    logger.info("Upserted weekly content for weeks %s", sorted(WEEKLY_CONTENT))
    return len(WEEKLY_CONTENT)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the Mamacita database")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="SQLAlchemy URL (defaults to DATABASE_URL)",
    )
    parser.add_argument("--admin-email", type=str, default="admin@mamacita.com")
    parser.add_argument("--admin-password", type=str, default="admin123")
    parser.add_argument("--admin-name", type=str, default="Admin Mamacita")
    parser.add_argument(
        "--skip-content",
        action="store_true",
        help="Only create the administrator",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")

    database_url = args.database_url or get_settings().database_url
    if not database_url:
        logger.error("No database configured; pass --database-url or set DATABASE_URL")
        return 1

    db = DbClient(database_url)
    seed_admin(db, args.admin_email, args.admin_password, args.admin_name)
    if not args.skip_content:
        seed_weekly_content(db)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
