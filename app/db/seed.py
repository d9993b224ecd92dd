"""
Seed the default branches (sucursales). Safe to run repeatedly: existing
names are reported and left alone.

    python -m app.db.seed
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select

from app.models.branch import Branch
from app.schemas.branch import BranchSeedResult

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger("app.branches")

# (name, address)
DEFAULT_BRANCHES = [
    ("Calle 59", "Calle 59 - Sucursal Principal"),
    ("Calle 50", "Calle 50 - Sucursal Secundaria"),
    ("Calle 13", "Calle 13 - Sucursal Norte"),
    ("Cocina", "Área de Cocina - Departamento Gastronómico"),
]


def seed_default_branches(session: "Session") -> list[BranchSeedResult]:
    results: list[BranchSeedResult] = []
    for name, address in DEFAULT_BRANCHES:
        existing = session.execute(select(Branch).where(Branch.name == name)).scalars().first()
        if existing:
            results.append(BranchSeedResult(action="exists", sucursal=name))
            logger.info("branch_seed_exists name=%s", name)
            continue
        session.add(Branch(name=name, address=address, is_active=True))
        session.flush()
        results.append(BranchSeedResult(action="created", sucursal=name))
        logger.info("branch_seed_created name=%s", name)
    session.commit()
    return results


def main() -> None:
    from app.core.config import settings
    from app.db.base import Base
    from app.db.session import build_engine, build_session_factory
    import app.models  # noqa: F401 - register models with Base.metadata

    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s [%(levelname)s] %(name)s %(message)s")
    engine = build_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    session = build_session_factory(engine)()
    try:
        for r in seed_default_branches(session):
            print(f"{r.action}: {r.sucursal}")
    finally:
        session.close()
        engine.dispose()


if __name__ == "__main__":
    main()
