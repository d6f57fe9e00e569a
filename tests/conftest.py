import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

from catalog_model import ContentKind, ContentRecord, ContentTable


def make_record(show_id, kind=ContentKind.MOVIE, title=None, release_year=2020, **fields):
    return ContentRecord(
        show_id=show_id,
        type=kind,
        title=title or f"Title {show_id}",
        release_year=release_year,
        **fields,
    )


SAMPLE_RECORDS = [
    make_record(
        "s1", ContentKind.MOVIE, "Dick Johnson Is Dead", 2020,
        director="Kirsten Johnson", country="United States", date_added="September 25, 2021",
        rating="PG-13", duration="90 min", listed_in="Documentaries",
        description="As her father nears the end of his life, filmmaker Kirsten Johnson stages his death.",
    ),
    make_record(
        "s2", ContentKind.TV_SHOW, "Blood & Water", 2021,
        casts="Ama Qamata, Khosi Ngema, Gail Mabalane", country="South Africa",
        date_added="September 24, 2021", rating="TV-MA", duration="2 Seasons",
        listed_in="International TV Shows, TV Dramas, TV Mysteries",
        description="After crossing paths at a party, a Cape Town teen sets out to prove who her sister is.",
    ),
    make_record(
        "s3", ContentKind.TV_SHOW, "Ganglands", 2021,
        director="Julien Leclercq", casts="Sami Bouajila, Tracy Gotoas", country="France",
        date_added=" September 24, 2021", rating="TV-MA", duration="1 Season",
        listed_in="Crime TV Shows, International TV Shows, TV Action & Adventure",
        description="To protect his family from a drug lord, expert thief Mehdi and his team are pulled into a turf war.",
    ),
    make_record(
        "s4", ContentKind.MOVIE, "Kota Drama", 2019,
        director="Rajiv Chilaka", casts="Salman Khan, Kajol", country="India",
        date_added="January 1, 2020", rating="TV-14", duration="155 min",
        listed_in="Dramas, International Movies",
        description="A man sets out to kill his rival.",
    ),
    make_record(
        "s5", ContentKind.MOVIE, "Mumbai Nights", 2012,
        director="Rajiv Chilaka, Anurag Kashyap", casts="Salman Khan, Nawazuddin Siddiqui",
        country="India, United States", date_added="not a date", rating="TV-14", duration="abc",
        listed_in="Thrillers",
        description="Violence erupts in the city.",
    ),
    make_record(
        "s6", ContentKind.TV_SHOW, "Seven Seasons", 2016,
        casts="Kajol", country="India", rating="TV-MA", duration="7 Seasons",
        listed_in="British TV Shows, Docuseries",
        description="A long-running show.",
    ),
    make_record(
        "s7", ContentKind.MOVIE, "Old Classic", 1998,
        director="", casts="Salman Khan", date_added="August 4, 2017", rating="TV-14",
        duration="120 min", listed_in="Classic Movies, Documentaries",
    ),
]

TODAY = "2022-01-01"


@pytest.fixture
def sample_table():
    return ContentTable.from_records(SAMPLE_RECORDS)


@pytest.fixture
def scenario_table():
    return ContentTable.from_records([
        make_record("1", ContentKind.MOVIE, release_year=2020, country="India,US"),
        make_record("2", ContentKind.TV_SHOW, release_year=2020, country="India"),
    ])


@pytest.fixture
def empty_table():
    return ContentTable.from_records([])


RAW_COLUMNS = [
    "show_id", "type", "title", "director", "cast", "country", "date_added",
    "release_year", "rating", "duration", "listed_in", "description",
]


@pytest.fixture
def raw_rows():
    """Kaggle-style rows (header `cast`), including rows the loader must skip."""
    return [
        ["s1", "Movie", "Dick Johnson Is Dead", "Kirsten Johnson", "", "United States",
         "September 25, 2021", "2020", "PG-13", "90 min", "Documentaries", "A daughter's tribute."],
        ["s2", "TV Show", "Blood & Water", "", "Ama Qamata, Khosi Ngema", "South Africa",
         " September 24, 2021", "2021", "TV-MA", "2 Seasons", "International TV Shows, TV Dramas", "A teen's search."],
        ["", "Movie", "No Id", "", "", "", "", "2019", "", "", "", ""],
        ["s1", "Movie", "Duplicate", "", "", "", "", "2019", "", "", "", ""],
        ["s5", "Movie", "Bad Year", "", "", "", "", "20x0", "", "", "", ""],
        ["s6", "Podcast", "Wrong Kind", "", "", "", "", "2018", "", "", "", ""],
        ["s7", "Movie", "Odd Fields", "  ", "Salman Khan", "India", "someday", "2015.0", "TV-14", "abc",
         "Dramas", "  Padded description  "],
    ]


@pytest.fixture
def catalog_csv(tmp_path, raw_rows):
    path = tmp_path / "netflix_titles.csv"
    pd.DataFrame(raw_rows, columns=RAW_COLUMNS).to_csv(path, index=False)
    return path
