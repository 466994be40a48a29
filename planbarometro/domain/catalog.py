"""
Built-in capability models.

The TOPP model (Technical, Operational, Political, Prospective) is the only
one populated; the national and subnational models are registered so that
clients can list them, but they carry no dimensions yet.
"""

from __future__ import annotations

from ..infrastructure.exceptions import ModelNotFoundError
from .models import CapabilityModel, Criterion, Dimension, Element

TOPP_MODEL_ID = "topp"
TOPP_DIMENSION_IDS: tuple[str, ...] = ("technical", "operational", "political", "prospective")


def _criterion(criterion_id: str, name: str, *elements: tuple[str, str]) -> Criterion:
    return Criterion(
        id=criterion_id,
        name=name,
        elements=tuple(Element(id=eid, name=text) for eid, text in elements),
    )


TOPP_MODEL = CapabilityModel(
    id=TOPP_MODEL_ID,
    name="Capacidades TOPP",
    description=(
        "Evalúa capacidades Técnicas, Operativas, Políticas y Prospectivas "
        "para gestionar transformaciones."
    ),
    dimensions=(
        Dimension(
            id="technical",
            name="Capacidad Técnica",
            description=(
                "Analizar el grado de disponibilidad y uso de evidencia, conocimiento "
                "experto y herramientas técnicas en la gestión pública."
            ),
            criteria=(
                _criterion(
                    "t1_1",
                    "Diagnóstico basado en evidencia",
                    ("t1_1_1", "¿El diagnóstico parte de datos validados?"),
                    ("t1_1_2", "¿Se consultó evidencia territorializada?"),
                ),
                _criterion(
                    "t1_2",
                    "Uso de herramientas analíticas",
                    ("t1_2_1", "¿Se emplean modelos, marcos lógicos, teorías de cambio?"),
                ),
                _criterion(
                    "t1_3",
                    "Calidad y disponibilidad de datos",
                    ("t1_3_1", "¿Hay registros administrativos útiles?"),
                    ("t1_3_2", "¿Los datos están actualizados?"),
                ),
                _criterion(
                    "t1_4",
                    "Capacidad de análisis técnico interno",
                    ("t1_4_1", "¿Existe una unidad técnica con autonomía y formación adecuada?"),
                ),
            ),
        ),
        Dimension(
            id="operational",
            name="Capacidad Operativa",
            description=(
                "Evaluar si existen los recursos, estructuras y procesos que permiten "
                "implementar políticas públicas de manera efectiva."
            ),
            criteria=(
                _criterion(
                    "t2_1",
                    "Claridad de roles y mandatos",
                    ("t2_1_1", "¿Las funciones están normativamente definidas y son operativas?"),
                ),
                _criterion(
                    "t2_2",
                    "Recursos humanos suficientes y capacitados",
                    ("t2_2_1", "¿Hay equipos técnicos estables?"),
                    ("t2_2_2", "¿Existe baja rotación del personal?"),
                ),
                _criterion(
                    "t2_3",
                    "Estructura organizacional habilitante",
                    ("t2_3_1", "¿La estructura facilita coordinación y ejecución?"),
                ),
                _criterion(
                    "t2_4",
                    "Capacidad presupuestaria",
                    (
                        "t2_4_1",
                        "¿Se cuenta con financiamiento previsible para implementar decisiones?",
                    ),
                ),
            ),
        ),
        Dimension(
            id="political",
            name="Capacidad Política",
            description=(
                "Medir la capacidad de construir legitimidad, alinear intereses, coordinar "
                "actores y sostener decisiones complejas."
            ),
            criteria=(
                _criterion(
                    "t3_1",
                    "Participación de actores clave",
                    ("t3_1_1", "¿Fueron incluidos actores relevantes en el diseño?"),
                ),
                _criterion(
                    "t3_2",
                    "Mecanismos de diálogo político",
                    ("t3_2_1", "¿Existen espacios institucionales de negociación?"),
                ),
                _criterion(
                    "t3_3",
                    "Alineación entre niveles de gobierno",
                    ("t3_3_1", "¿Los niveles subnacional y nacional actúan coordinadamente?"),
                ),
                _criterion(
                    "t3_4",
                    "Liderazgo y voluntad política",
                    (
                        "t3_4_1",
                        "¿Existe respaldo explícito de autoridades a las decisiones técnicas?",
                    ),
                ),
            ),
        ),
        Dimension(
            id="prospective",
            name="Capacidad Prospectiva",
            description=(
                "Examinar la capacidad de anticipar disrupciones, construir visiones "
                "compartidas y orientar el rumbo estratégico de las transformaciones."
            ),
            criteria=(
                _criterion(
                    "t4_1",
                    "Construcción de visión compartida",
                    ("t4_1_1", "¿Existe una visión estratégica co-construida a largo plazo?"),
                ),
                _criterion(
                    "t4_2",
                    "Escenarios futuros y anticipación",
                    ("t4_2_1", "¿Se han construido escenarios alternativos?"),
                    ("t4_2_2", "¿Se consideran disrupciones potenciales?"),
                ),
                _criterion(
                    "t4_3",
                    "Mecanismos de revisión iterativa",
                    (
                        "t4_3_1",
                        "¿Se han definido momentos y procesos para actualizar políticas o planes?",
                    ),
                ),
                _criterion(
                    "t4_4",
                    "Capacidad de aprendizaje institucional",
                    (
                        "t4_4_1",
                        "¿Se documentan aprendizajes y se ajustan políticas a partir de la "
                        "experiencia?",
                    ),
                ),
            ),
        ),
    ),
)

NATIONAL_MODEL = CapabilityModel(
    id="nacional",
    name="Nacional",
    description=(
        "Enfoque en instrumentos de gobierno y administración del Estado para el "
        "desarrollo nacional."
    ),
)

SUBNATIONAL_MODEL = CapabilityModel(
    id="subnacional",
    name="Subnacional",
    description="Análisis de articulación entre niveles nacional y subnacional de planificación.",
)

_MODELS: dict[str, CapabilityModel] = {
    m.id: m for m in (TOPP_MODEL, NATIONAL_MODEL, SUBNATIONAL_MODEL)
}


def list_models() -> list[CapabilityModel]:
    return list(_MODELS.values())


def get_model(model_id: str) -> CapabilityModel:
    try:
        return _MODELS[model_id]
    except KeyError:
        raise ModelNotFoundError(model_id) from None
