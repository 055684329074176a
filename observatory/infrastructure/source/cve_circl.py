"""CVE CIRCL feed of the most recently published CVE 5.x records."""

import logging
from typing import Any

from pydantic import BaseModel, Field

from observatory.domain.shared.model.record import CanonicalEvent, Category, Severity
from observatory.infrastructure.source.base import HttpSourceAdapter, SourcePayload
from observatory.infrastructure.source.parsing import parse_timestamp
from observatory.sdk.source.config import SourceConfig

logger = logging.getLogger(__name__)


class CveCirclConfig(SourceConfig):
    url: str = "https://cve.circl.lu/api/last"


class CvssBlock(BaseModel):
    baseScore: float | None = None
    baseSeverity: str | None = None
    vectorString: str | None = None


class CnaMetric(BaseModel):
    cvssV3_1: CvssBlock | None = None
    cvssV4_0: CvssBlock | None = None


class LangValue(BaseModel):
    lang: str = ""
    value: str = ""


class Affected(BaseModel):
    vendor: str = "n/a"
    product: str = "n/a"


class ProblemTypeDescription(BaseModel):
    cweId: str | None = None


class ProblemType(BaseModel):
    descriptions: list[ProblemTypeDescription] = Field(default_factory=list)


class CnaContainer(BaseModel):
    title: str | None = None
    descriptions: list[LangValue] = Field(default_factory=list)
    affected: list[Affected] = Field(default_factory=list)
    problemTypes: list[ProblemType] = Field(default_factory=list)
    metrics: list[CnaMetric] = Field(default_factory=list)


class Containers(BaseModel):
    cna: CnaContainer | None = None


class CveMetadata(BaseModel):
    cveId: str
    state: str = "PUBLISHED"
    dateReserved: str | None = None
    datePublished: str | None = None
    dateUpdated: str | None = None


class Cve5Record(BaseModel):
    dataType: str
    cveMetadata: CveMetadata
    containers: Containers = Field(default_factory=Containers)


def severity_from_cvss(score: float) -> Severity:
    if score >= 9.0:
        return Severity.CRITICAL
    if score >= 7.0:
        return Severity.HIGH
    if score >= 4.0:
        return Severity.MEDIUM
    return Severity.LOW


def classify(cna: CnaContainer) -> tuple[Severity, float | None, str | None]:
    """Severity from the first CVSS 3.1/4.0 score, else the vendor's base severity.

    Records with neither are classified low.
    """
    for metric in cna.metrics:
        block = metric.cvssV3_1 or metric.cvssV4_0
        if block is not None and block.baseScore is not None:
            return severity_from_cvss(block.baseScore), block.baseScore, block.vectorString

    if cna.metrics and cna.metrics[0].cvssV3_1 and cna.metrics[0].cvssV3_1.baseSeverity:
        try:
            return Severity(cna.metrics[0].cvssV3_1.baseSeverity.lower()), None, None
        except ValueError:
            pass
    return Severity.LOW, None, None


class CveCirclAdapter(HttpSourceAdapter[CveCirclConfig]):
    """Newly published vulnerabilities, classified by CVSS score."""

    name = "cve_circl"
    config_class = CveCirclConfig

    async def collect(self) -> SourcePayload:
        raw: list[dict[str, Any]] = await self.get_json(self._config.url, list[dict[str, Any]])
        now = self._clock.now()

        events = []
        for item in raw:
            if len(events) >= self._config.limit:
                break
            # The feed mixes CVE 5.x records with older formats; only 5.x is read
            if item.get("dataType") != "CVE_RECORD" or "cveMetadata" not in item:
                continue
            record = Cve5Record.model_validate(item)
            if record.cveMetadata.state == "REJECTED":
                continue
            cna = record.containers.cna
            if cna is None:
                continue

            severity, score, vector = classify(cna)
            description = next(
                (d.value for d in cna.descriptions if d.lang.startswith("en")),
                cna.title or "No description available",
            )
            products = [f"{a.vendor}/{a.product}" for a in cna.affected[:5]]
            cwe = next(
                (d.cweId for p in cna.problemTypes[:1] for d in p.descriptions[:1] if d.cweId),
                None,
            )
            cve_id = record.cveMetadata.cveId
            published = record.cveMetadata.datePublished or record.cveMetadata.dateReserved

            events.append(
                CanonicalEvent(
                    id=f"CVE-{cve_id}",
                    category=Category.CYBER,
                    kind="vulnerability",
                    severity=severity,
                    timestamp=parse_timestamp(published, now),
                    label=f"{cve_id}: {description[:200]}",
                    indicator=cve_id,
                    source="CVE CIRCL",
                    group=cna.affected[0].vendor if cna.affected else None,
                    tags=frozenset(t for t in (cwe,) if t),
                    metadata={
                        "summary": description[:500],
                        "cvss": score,
                        "cvss_vector": vector,
                        "cwe": cwe,
                        "affected_products": products,
                        "last_modified": record.cveMetadata.dateUpdated or published,
                    },
                )
            )

        logger.debug("Parsed %d CVE records out of %d entries", len(events), len(raw))
        return SourcePayload(events=events)
