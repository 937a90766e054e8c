"""Nox sessions for multi-environment testing and quality assurance."""

import nox


@nox.session(python=["3.13", "3.14"])
def tests(session: nox.Session) -> None:
    """Run test suite with coverage reporting.

    Args:
        session: The nox session object.
    """
    session.install("-e", ".[test]")
    session.run(
        "pytest",
        "--cov=decom_status",
        "--cov-report=term-missing:skip-covered",
        "--cov-fail-under=80",
    )


@nox.session(python=["3.14"])
def lint(session: nox.Session) -> None:
    """Run ruff linting and formatting checks.

    Args:
        session: The nox session object.
    """
    session.install("ruff")
    session.run("ruff", "check", ".")
    session.run("ruff", "format", "--check", ".")


@nox.session(python=["3.14"])
def typecheck(session: nox.Session) -> None:
    """Run basedpyright type checking.

    Args:
        session: The nox session object.
    """
    session.install("-e", ".[test]", "basedpyright")
    session.run("basedpyright")
