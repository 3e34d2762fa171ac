import pytest

from db.session import make_async_url


@pytest.mark.parametrize(
    "url,expected",
    [
        ("postgresql://u:p@db:5432/maps", "postgresql+psycopg://u:p@db:5432/maps"),
        ("postgres://u:p@db/maps", "postgresql+psycopg://u:p@db/maps"),
        ("postgis://u:p@db/maps", "postgresql+psycopg://u:p@db/maps"),
        ("postgresql+psycopg://db/maps", "postgresql+psycopg://db/maps"),
        ("sqlite:///maps.db", None),
    ],
)
def test_make_async_url(url, expected):
    assert make_async_url(url) == expected
