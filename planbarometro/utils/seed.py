from __future__ import annotations

from typing import Any

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from planbarometro.infrastructure.logging import get_logger
from planbarometro.infrastructure.models import Base
from planbarometro.infrastructure.repositories import BestPracticeRepo

logger = get_logger(__name__)

INITIAL_BEST_PRACTICES: list[dict[str, Any]] = [
    {
        "title": (
            "Innovación en la gestión municipal: experiencias en gobiernos locales de "
            "América Latina"
        ),
        "description": (
            "Estudio que analiza innovaciones exitosas en gestión municipal a través de casos "
            "de Colombia, Chile, México y otros países latinoamericanos"
        ),
        "country": "América Latina (varios países)",
        "institution": "Pontificia Universidad Católica de Chile",
        "year": 2020,
        "source_url": (
            "https://politicaspublicas.uc.cl/web/content/uploads/2020/03/"
            "LIBRO_innovaciones-municpales_OK_Version-DIGITAL-2.pdf"
        ),
        "source_type": "academic",
        "target_criteria": [
            "Coordinación institucional",
            "Innovación",
            "Gestión municipal",
            "Participación ciudadana",
        ],
        "results": (
            "Identificación de 15 casos exitosos de innovación municipal con impacto medible "
            "en eficiencia administrativa y satisfacción ciudadana"
        ),
        "key_lessons": [
            "La innovación municipal requiere liderazgo político fuerte",
            "Los sistemas de gestión digital mejoran la eficiencia en 40-60%",
            "La participación ciudadana es clave para el éxito sostenible",
        ],
        "tags": ["gestión municipal", "innovación", "América Latina", "administración pública"],
    },
    {
        "title": (
            "Libro de buenas prácticas de gestión para resultados en el desarrollo en "
            "Latinoamérica y el Caribe"
        ),
        "description": (
            "Compendio de mejores prácticas en gestión pública orientada a resultados con "
            "casos documentados del BID en la región"
        ),
        "country": "América Latina y el Caribe",
        "institution": "Banco Interamericano de Desarrollo (BID)",
        "year": 2018,
        "source_url": "https://publications.iadb.org/es",
        "source_type": "pdf",
        "target_criteria": [
            "Gestión para resultados",
            "Planificación estratégica",
            "Monitoreo y evaluación",
            "Eficiencia administrativa",
        ],
        "results": (
            "Documentación de 25 casos exitosos con mejoras promedio de 35% en indicadores "
            "de gestión pública"
        ),
        "key_lessons": [
            "Los sistemas de monitoreo son esenciales para la gestión por resultados",
            "La capacitación técnica del personal mejora los resultados significativamente",
            "La coordinación intersectorial incrementa el impacto de las políticas",
        ],
        "tags": ["gestión por resultados", "BID", "desarrollo", "políticas públicas"],
    },
    {
        "title": "Políticas públicas y sistemas de innovación en gobiernos locales",
        "description": (
            "Análisis de políticas de innovación implementadas en gobiernos locales de "
            "Ecuador con enfoque en participación comunitaria"
        ),
        "country": "Ecuador",
        "institution": "FLACSO Andes",
        "year": 2021,
        "source_url": "https://revistas.flacsoandes.edu.ec/mundosplurales/article/view/6419/4992",
        "source_type": "academic",
        "target_criteria": [
            "Innovación",
            "Participación ciudadana",
            "Gobiernos locales",
            "Políticas públicas",
        ],
        "results": (
            "Implementación de 8 sistemas de innovación local con incremento del 45% en "
            "participación ciudadana"
        ),
        "key_lessons": [
            "La innovación local requiere marcos regulatorios flexibles",
            "Los espacios de co-creación ciudadana son fundamentales",
            "La sostenibilidad financiera es clave para escalar innovaciones",
        ],
        "tags": ["innovación local", "Ecuador", "participación", "FLACSO"],
    },
]


def initialise_database(engine: Engine) -> bool:
    """
    Ensure all ORM tables exist.

    Returns:
        True if every table already existed before this call, False if at least one table
        needed to be created.
    """

    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())
    expected_tables = [table.name for table in Base.metadata.sorted_tables]
    already_exists = all(table in existing_tables for table in expected_tables)
    Base.metadata.create_all(engine)
    if not already_exists:
        logger.info(f"Created tables: {', '.join(sorted(set(expected_tables) - existing_tables))}")
    return already_exists


def seed_best_practices(
    session: Session, practices: list[dict[str, Any]] | None = None, force: bool = False
) -> int:
    """
    Load the starter best practices into an empty repository.

    Nothing is inserted when active practices already exist unless ``force`` is set.
    Returns the number of practices inserted.
    """
    repo = BestPracticeRepo(session)
    existing = repo.count_active()
    if existing and not force:
        logger.info(f"Skipping best-practice seed: {existing} practices already stored")
        return 0

    rows = INITIAL_BEST_PRACTICES if practices is None else practices
    for row in rows:
        repo.create(**row)
    logger.info(f"Seeded {len(rows)} best practices")
    return len(rows)
