"""Architectural boundary tests using pytest-archon.

These tests verify that the codebase follows clean architecture principles:
- Domain layer has no dependencies on adapters
- Application services don't depend on adapters
- Adapters can depend on domain
- No circular dependencies
"""

import pytest
from pytest_archon import archrule


def test_domain_models_have_no_dependencies() -> None:
    """Domain models should not import any other modules except standard library and domain itself."""
    (
        archrule("domain models", comment="Domain models should be independent")
        .match("area_realtime.domain.models*")
        .should_not_import("area_realtime.adapters*")
        .should_not_import("area_realtime.application*")
        .should_not_import("area_realtime.domain.contracts*")
        .should_not_import("area_realtime.domain.ports*")
        .may_import("area_realtime.domain.models*")
        .check("area_realtime")
    )


def test_domain_contracts_have_no_dependencies() -> None:
    """Domain contracts (protocols/interfaces) should not import adapters or application."""
    (
        archrule("domain contracts", comment="Domain contracts should be independent")
        .match("area_realtime.domain.contracts*")
        .should_not_import("area_realtime.adapters*")
        .should_not_import("area_realtime.application*")
        .may_import("area_realtime.domain*")
        .check("area_realtime")
    )


def test_domain_ports_have_no_dependencies() -> None:
    """Domain ports (interfaces) should not import adapters or application."""
    (
        archrule("domain ports", comment="Domain ports should be independent")
        .match("area_realtime.domain.ports*")
        .should_not_import("area_realtime.adapters*")
        .should_not_import("area_realtime.application*")
        .may_import("area_realtime.domain*")
        .check("area_realtime")
    )


def test_application_services_dont_import_adapters() -> None:
    """Application services should not depend on adapters (infrastructure layer)."""
    (
        archrule(
            "application services", comment="Application services should not depend on adapters"
        )
        .match("area_realtime.application*")
        .should_not_import("area_realtime.adapters*")
        .should_not_import("area_realtime.composition")
        .may_import("area_realtime.domain*")
        .may_import("area_realtime.application*")
        .check("area_realtime")
    )


def test_adapters_dont_import_application() -> None:
    """Adapters should not import application services (to avoid cycles)."""
    (
        archrule(
            "adapters independence", comment="Adapters should not depend on application services"
        )
        .match("area_realtime.adapters*")
        .should_not_import("area_realtime.application*")
        .should_not_import("area_realtime.composition")
        .may_import("area_realtime.domain*")
        .may_import("area_realtime.adapters*")
        .check("area_realtime", only_direct_imports=True)
    )


def test_no_circular_dependencies_in_domain() -> None:
    """Domain layer should not have circular dependencies."""
    (
        archrule("domain no cycles", comment="Domain layer should not have circular dependencies")
        .match("area_realtime.domain*")
        .should_not_import("area_realtime.adapters*")
        .should_not_import("area_realtime.application*")
        .may_import("area_realtime.domain*")
        .check("area_realtime", only_direct_imports=True)
    )


@pytest.mark.parametrize("package", ["auth", "directory", "storage"])
def test_collaborator_adapters_dont_import_web(package: str) -> None:
    """Auth, directory and storage adapters should work without the web server."""
    (
        archrule(f"{package} independence", comment="Collaborators should not depend on web")
        .match(f"area_realtime.adapters.{package}*")
        .should_not_import("area_realtime.adapters.web*")
        .may_import("area_realtime.domain*")
        .may_import("area_realtime.adapters.api_request_logger")
        .check("area_realtime")
    )
