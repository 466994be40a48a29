"""
Translations for user-facing strings produced by the domain layer.

Text-producing functions receive a translator explicitly instead of reading
a process-wide "current language"; the web layer builds one per request from
the ``lang`` query parameter.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Literal

Locale = Literal["en", "es"]
DEFAULT_LOCALE: Locale = "es"
FALLBACK_LOCALE: Locale = "en"

Translate = Callable[..., str]

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        # Dimensions
        "technicalCapacity": "Technical Capacity",
        "operationalCapacity": "Operational Capacity",
        "politicalCapacity": "Political Capacity",
        "prospectiveCapacity": "Prospective Capacity",
        "allDimensions": "All dimensions",
        # Score status
        "excellent": "Excellent",
        "good": "Good",
        "fair": "Fair",
        "poor": "Poor",
        # Severity / risk
        "high": "High",
        "medium": "Medium",
        "low": "Low",
        "highRisk": "HIGH",
        "mediumRisk": "MEDIUM",
        "lowRisk": "LOW",
        "riskLevel": "Risk Level",
        "impact": "Impact",
        "urgency": "Urgency",
        "generalRisk": "General Risk",
        "stability": "Stability",
        "noAlertsMessage": "No strategic alerts detected. The evaluation shows a favorable situation.",
        "favorableSituationText": (
            "The evaluation results indicate adequate balance between different capabilities. "
            "It is recommended to maintain current levels and continue with periodic monitoring "
            "to ensure this favorable situation is maintained."
        ),
        # Alerts
        "designWithoutPoliticalTraction": "Design without political traction",
        "designWithoutPoliticalTractionDesc": (
            "High technical capacity but without sufficient political support. This may produce "
            "sophisticated plans that are not effectively implemented."
        ),
        "designWithoutPoliticalTractionRec": (
            "Strengthen political dialogue mechanisms and alliance building to back technical "
            "proposals."
        ),
        "implementationWithoutDirection": "Implementation without strategic direction",
        "implementationWithoutDirectionDesc": (
            "High operational capacity but without clear prospective vision. May lead to "
            "fragmented actions without strategic coherence."
        ),
        "implementationWithoutDirectionRec": (
            "Develop strategic planning processes and shared long-term vision building."
        ),
        "governmentWithoutGovernance": "Government without governance",
        "governmentWithoutGovernanceDesc": (
            "High formal political capacity but insufficient technical and operational "
            "capabilities to transform."
        ),
        "governmentWithoutGovernanceRec": (
            "Invest in strengthening technical capabilities and operational structures to "
            "materialize political support."
        ),
        "generalImbalance": "Imbalance between capabilities",
        "generalImbalanceDesc": (
            "There is a large disparity between different institutional capabilities, which can "
            "generate inefficiencies and internal conflicts."
        ),
        "generalImbalanceRec": (
            "Develop a comprehensive institutional strengthening plan that balances all "
            "capabilities."
        ),
        "insufficientCapabilities": "Insufficient institutional capabilities",
        "insufficientCapabilitiesDesc": (
            "General capabilities are below the minimum level required for effective "
            "transformation management."
        ),
        "insufficientCapabilitiesRec": (
            "Implement a comprehensive institutional strengthening program as a strategic "
            "priority."
        ),
        "highAbsentElements": "High percentage of absent elements",
        "highAbsentElementsDesc": (
            "{percentage}% of elements were marked as absent. This indicates important gaps in "
            "institutional capabilities."
        ),
        "highAbsentElementsRec": (
            "Systematically review each absent element and develop specific plans to implement "
            "these missing capabilities."
        ),
        "mediumAbsentElements": "Important absent elements",
        "mediumAbsentElementsDesc": (
            "{percentage}% of elements were marked as absent. Some key capabilities require "
            "development."
        ),
        "mediumAbsentElementsRec": (
            "Prioritize the development of the most critical absent capabilities for "
            "institutional functioning."
        ),
        "weakProspectiveCapabilities": "Critical prospective capabilities",
        "weakProspectiveCapabilitiesDesc": (
            "Long-term planning and anticipation capabilities are severely weakened, "
            "compromising strategic sustainability."
        ),
        "weakProspectiveCapabilitiesRec": (
            "Urgently implement strategic planning processes, scenario building and early "
            "warning systems."
        ),
        "weakTechnicalCapabilities": "Insufficient technical capabilities",
        "weakTechnicalCapabilitiesDesc": (
            "Technical competencies are below critical level, limiting the quality of diagnoses "
            "and proposals."
        ),
        "weakTechnicalCapabilitiesRec": (
            "Strengthen technical teams through training, expertise hiring and information "
            "systems improvement."
        ),
        "politicalInstabilityRisk": "Political instability risk",
        "politicalInstabilityRiskDesc": (
            "Developed technical capabilities but weak political base may generate resistance "
            "and abrupt direction changes."
        ),
        "politicalInstabilityRiskRec": (
            "Develop political communication strategies and consensus building to sustain "
            "technical proposals."
        ),
        "operationalBottlenecks": "Operational bottlenecks",
        "operationalBottlenecksDesc": (
            "Limited operational capabilities will prevent effective implementation of plans "
            "and policies."
        ),
        "operationalBottlenecksRec": (
            "Review and strengthen processes, systems and organizational structures to improve "
            "execution capacity."
        ),
        "isolatedExcellence": "Excellent isolated capacity",
        "isolatedExcellenceDesc": (
            "{dimension} is excellent but isolated. Without support from other dimensions, its "
            "potential will not be fully realized."
        ),
        "isolatedExcellenceRec": (
            "Leverage the strength in {dimension} to drive development of other dimensions "
            "through integrated programs."
        ),
        "moderateBalancedCapabilities": "Moderate but balanced capabilities",
        "moderateBalancedCapabilitiesDesc": (
            "Capabilities are balanced but at intermediate level. There is potential for "
            "coordinated growth."
        ),
        "moderateBalancedCapabilitiesRec": (
            "Implement coordinated strengthening strategies to elevate all capabilities to the "
            "next level in a balanced manner."
        ),
    },
    "es": {
        "technicalCapacity": "Capacidad Técnica",
        "operationalCapacity": "Capacidad Operativa",
        "politicalCapacity": "Capacidad Política",
        "prospectiveCapacity": "Capacidad Prospectiva",
        "allDimensions": "Todas las dimensiones",
        "excellent": "Excelente",
        "good": "Bueno",
        "fair": "Regular",
        "poor": "Deficiente",
        "high": "Alta",
        "medium": "Media",
        "low": "Baja",
        "highRisk": "ALTO",
        "mediumRisk": "MEDIO",
        "lowRisk": "BAJO",
        "riskLevel": "Nivel de Riesgo",
        "impact": "Impacto",
        "urgency": "Urgencia",
        "generalRisk": "Riesgo General",
        "stability": "Estabilidad",
        "noAlertsMessage": (
            "No se detectaron alertas estratégicas. La evaluación muestra una situación favorable."
        ),
        "favorableSituationText": (
            "Los resultados de la evaluación indican un equilibrio adecuado entre las diferentes "
            "capacidades. Se recomienda mantener los niveles actuales y continuar con el "
            "monitoreo periódico para asegurar que se mantenga esta situación favorable."
        ),
        "designWithoutPoliticalTraction": "Diseño sin tracción política",
        "designWithoutPoliticalTractionDesc": (
            "Alta capacidad técnica pero sin apoyo político suficiente. Esto puede generar "
            "planes sofisticados que no se implementan efectivamente."
        ),
        "designWithoutPoliticalTractionRec": (
            "Fortalecer mecanismos de diálogo político y construcción de alianzas para respaldar "
            "las propuestas técnicas."
        ),
        "implementationWithoutDirection": "Implementación sin dirección estratégica",
        "implementationWithoutDirectionDesc": (
            "Alta capacidad operativa pero sin visión prospectiva clara. Puede conducir a "
            "acciones fragmentadas sin coherencia estratégica."
        ),
        "implementationWithoutDirectionRec": (
            "Desarrollar procesos de planificación estratégica y construcción de visión "
            "compartida a largo plazo."
        ),
        "governmentWithoutGovernance": "Gobierno sin gobierno",
        "governmentWithoutGovernanceDesc": (
            "Alta capacidad política formal pero sin capacidades técnicas ni operativas "
            "suficientes para transformar."
        ),
        "governmentWithoutGovernanceRec": (
            "Invertir en fortalecimiento de capacidades técnicas y estructuras operativas para "
            "materializar el respaldo político."
        ),
        "generalImbalance": "Desequilibrio entre capacidades",
        "generalImbalanceDesc": (
            "Existe una gran disparidad entre las diferentes capacidades institucionales, lo que "
            "puede generar ineficiencias y conflictos internos."
        ),
        "generalImbalanceRec": (
            "Desarrollar un plan integral de fortalecimiento institucional que equilibre todas "
            "las capacidades."
        ),
        "insufficientCapabilities": "Capacidades institucionales insuficientes",
        "insufficientCapabilitiesDesc": (
            "Las capacidades generales están por debajo del nivel mínimo requerido para una "
            "gestión efectiva de transformaciones."
        ),
        "insufficientCapabilitiesRec": (
            "Implementar un programa integral de fortalecimiento institucional como prioridad "
            "estratégica."
        ),
        "highAbsentElements": "Alto porcentaje de elementos ausentes",
        "highAbsentElementsDesc": (
            "{percentage}% de los elementos fueron marcados como ausentes. Esto indica "
            "importantes brechas en las capacidades institucionales."
        ),
        "highAbsentElementsRec": (
            "Revisar sistemáticamente cada elemento ausente y desarrollar planes específicos "
            "para implementar estas capacidades faltantes."
        ),
        "mediumAbsentElements": "Elementos importantes ausentes",
        "mediumAbsentElementsDesc": (
            "{percentage}% de los elementos fueron marcados como ausentes. Algunas capacidades "
            "clave requieren desarrollo."
        ),
        "mediumAbsentElementsRec": (
            "Priorizar el desarrollo de las capacidades ausentes más críticas para el "
            "funcionamiento institucional."
        ),
        "weakProspectiveCapabilities": "Capacidades prospectivas críticas",
        "weakProspectiveCapabilitiesDesc": (
            "Las capacidades de planificación a largo plazo y anticipación están muy "
            "debilitadas, comprometiendo la sostenibilidad estratégica."
        ),
        "weakProspectiveCapabilitiesRec": (
            "Implementar urgentemente procesos de planificación estratégica, construcción de "
            "escenarios y sistemas de alerta temprana."
        ),
        "weakTechnicalCapabilities": "Capacidades técnicas insuficientes",
        "weakTechnicalCapabilitiesDesc": (
            "Las competencias técnicas están por debajo del nivel crítico, limitando la calidad "
            "de diagnósticos y propuestas."
        ),
        "weakTechnicalCapabilitiesRec": (
            "Fortalecer equipos técnicos mediante capacitación, contratación de experticia y "
            "mejora de sistemas de información."
        ),
        "politicalInstabilityRisk": "Riesgo de inestabilidad política",
        "politicalInstabilityRiskDesc": (
            "Capacidades técnicas desarrolladas pero base política débil puede generar "
            "resistencia y cambios abruptos de dirección."
        ),
        "politicalInstabilityRiskRec": (
            "Desarrollar estrategias de comunicación política y construcción de consensos para "
            "sostener las propuestas técnicas."
        ),
        "operationalBottlenecks": "Cuellos de botella operativos",
        "operationalBottlenecksDesc": (
            "Las capacidades operativas limitadas impedirán la implementación efectiva de planes "
            "y políticas."
        ),
        "operationalBottlenecksRec": (
            "Revisar y fortalecer procesos, sistemas y estructuras organizacionales para mejorar "
            "la capacidad de ejecución."
        ),
        "isolatedExcellence": "Capacidad excelente aislada",
        "isolatedExcellenceDesc": (
            "La {dimension} es excelente pero está aislada. Sin apoyo de otras dimensiones, su "
            "potencial no se realizará completamente."
        ),
        "isolatedExcellenceRec": (
            "Aprovechar la fortaleza en {dimension} para impulsar el desarrollo de las otras "
            "dimensiones mediante programas integrados."
        ),
        "moderateBalancedCapabilities": "Capacidades moderadas pero equilibradas",
        "moderateBalancedCapabilitiesDesc": (
            "Las capacidades están equilibradas pero en nivel intermedio. Existe potencial de "
            "crecimiento coordinado."
        ),
        "moderateBalancedCapabilitiesRec": (
            "Implementar estrategias de fortalecimiento coordinado para elevar todas las "
            "capacidades al siguiente nivel de manera equilibrada."
        ),
    },
}

SUPPORTED_LOCALES: tuple[str, ...] = tuple(TRANSLATIONS)


def normalize_locale(locale: str | None) -> str:
    """Map ``"es-ES"``, ``"EN"`` and friends onto a supported locale."""
    if not locale:
        return DEFAULT_LOCALE
    code = locale.replace("_", "-").split("-", 1)[0].strip().lower()
    return code if code in TRANSLATIONS else DEFAULT_LOCALE


class Translator:
    """
    Callable lookup bound to a single locale.

    Example:
        >>> t = Translator("en")
        >>> t("highAbsentElementsDesc", percentage=60)
        '60% of elements were marked as absent. ...'
    """

    def __init__(self, locale: str = DEFAULT_LOCALE):
        self.locale = normalize_locale(locale)
        self._table = TRANSLATIONS[self.locale]
        self._fallback = TRANSLATIONS[FALLBACK_LOCALE]

    def __call__(self, key: str, **params: Any) -> str:
        text = self._table.get(key) or self._fallback.get(key) or key
        if params:
            try:
                return text.format(**params)
            except (KeyError, IndexError, ValueError):
                return text
        return text

    def __repr__(self) -> str:
        return f"Translator(locale={self.locale!r})"


def get_translator(locale: str | None = None) -> Translator:
    return Translator(normalize_locale(locale))
