import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13"]


def _install(session: nox.Session, extras: str = "test") -> None:
    """Install the project with the given extras into the nox virtualenv."""
    session.install("-e", f".[{extras}]")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run full test suite across Python versions."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Pricing, fees, state machine, signing and payload rules only."""
    _install(session)
    session.run("pytest", "tests/ordering/domain/", "tests/notifications/domain/")


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_sqlite(session: nox.Session) -> None:
    """Application and API tests against the sqlite overlay of domain.toml."""
    _install(session)
    session.run(
        "pytest",
        "--env",
        "sqlite",
        "tests/ordering/application/",
        "tests/ordering/integration/",
    )
