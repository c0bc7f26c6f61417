"""
Health and good-to-go checks.

The health document follows the FT health check format: one entry per
check, each time-boxed, and the endpoint itself always answers 200.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Tuple

from ..concepts_api import ConceptsAPIStore
from ..config import ServiceConfig
from ..errors import UpstreamError
from ..store import ConceptStore

logger = logging.getLogger(__name__)

HEALTH_CHECK_TIMEOUT = 10.0


@dataclass(frozen=True)
class HealthCheck:
    """Static description of one health check."""
    id: str
    name: str
    severity: int
    business_impact: str
    technical_summary: str
    panic_guide: str
    checker: Callable[[], str]


def store_health_check(store: ConceptStore) -> HealthCheck:
    """Describe the connectivity check for the configured store."""
    if isinstance(store, ConceptsAPIStore):
        return HealthCheck(
            id="public-concepts-api-check",
            name="Check connectivity to public-concepts-api",
            severity=2,
            business_impact="Unable to respond to Public Things api requests",
            technical_summary=(
                "Not being able to communicate with public-concepts-api means that "
                "requests for things cannot be performed."
            ),
            panic_guide="https://dewey.in.ft.com/view/system/public-things-api",
            checker=store.check_connectivity,
        )
    return HealthCheck(
        id="neo4j-connectivity-check",
        name="Check connectivity to Neo4j",
        severity=1,
        business_impact="Unable to respond to Public Things api requests",
        technical_summary="Cannot connect to Neo4j. If this check fails, check that Neo4j instance is up and running.",
        panic_guide="https://dewey.in.ft.com/view/system/public-things-api",
        checker=store.check_connectivity,
    )


class HealthService:
    """Runs health checks against the concept store."""

    def __init__(self, store: ConceptStore, config: ServiceConfig, timeout: float = HEALTH_CHECK_TIMEOUT):
        self.config = config
        self.timeout = timeout
        self.checks: List[HealthCheck] = [store_health_check(store)]

    def _run_check(self, check: HealthCheck) -> Tuple[bool, str]:
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="health")
        future = executor.submit(check.checker)
        try:
            return True, future.result(timeout=self.timeout)
        except FutureTimeoutError:
            return False, f"Timed out after {self.timeout:g} second(s)"
        except UpstreamError as e:
            return False, str(e)
        finally:
            executor.shutdown(wait=False)

    def health(self) -> Dict[str, Any]:
        """Run every check and build the health document."""
        results = []
        for check in self.checks:
            ok, output = self._run_check(check)
            if not ok:
                logger.warning(f"Health check {check.id} failed: {output}")
            results.append(
                {
                    "id": check.id,
                    "name": check.name,
                    "ok": ok,
                    "severity": check.severity,
                    "businessImpact": check.business_impact,
                    "technicalSummary": check.technical_summary,
                    "panicGuide": check.panic_guide,
                    "checkOutput": output,
                    "lastUpdated": datetime.now(timezone.utc).isoformat(),
                }
            )

        return {
            "schemaVersion": 1,
            "systemCode": self.config.app_system_code,
            "name": self.config.app_name,
            "description": "Public API for retrieving things (concepts) and their relationships",
            "checks": results,
            "ok": all(result["ok"] for result in results),
        }

    def gtg(self) -> Tuple[bool, str]:
        """Good-to-go: fails fast on the first failing check."""
        for check in self.checks:
            ok, output = self._run_check(check)
            if not ok:
                return False, output
        return True, "OK"
