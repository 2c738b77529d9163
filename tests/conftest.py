import pytest

from sparqljson import DefaultDataFactory, ParserSettings, SparqlJsonParser

try:
    from dotenv import load_dotenv
    from pathlib import Path

    # Load test-time environment variables (e.g. SPARQL endpoint config)
    load_dotenv(Path(__file__).with_name(".env"), override=True)
except Exception:
    # It is safe to run tests without a .env; live endpoint tests will skip
    # themselves automatically if required env vars are missing.
    pass

# Register shared fixtures from the `tests/fixtures` package.
# - sparql_fixtures: live endpoint + monkeypatched SPARQLWrapper fixtures.
pytest_plugins = [
    "tests.fixtures.sparql_fixtures",
]


@pytest.fixture(scope="function")
def df():
    """The default term factory, used to build expected terms."""
    return DefaultDataFactory()


@pytest.fixture(scope="function")
def parser():
    """
    A parser with ``?``-prefixed variables and strict missing-results
    handling.
    """
    return SparqlJsonParser(
        ParserSettings(
            prefix_variable_question_mark=True,
            suppress_missing_stream_results_error=False,
        )
    )
