import numpy as np
import pandas as pd
import pytest

from data_processing_part_1 import (
    NO_GENRES,
    DataProcess,
    MovieDataExtractor,
    MovieDataTransform,
    default_file_paths,
    explode_genres,
    split_title_year,
)


@pytest.mark.parametrize("raw, title, year", [
    ("Toy Story (1995)", "Toy Story", 1995),
    ("Malcolm X (1992)", "Malcolm X", 1992),
    ("Texas, USA (1919-1929)", "Texas, USA", 1919),
    ("Cosmos (2007-)", "Cosmos", 2007),
    ("Fight Club (1999) ", "Fight Club", 1999),
    ("Untitled Project", "Untitled Project", None),
    ("Babylon 5", "Babylon 5", None),
    ("1984 (1984) remake", "1984 (1984) remake", None),
])
def test_split_title_year(raw, title, year):
    assert split_title_year(raw) == (title, year)


def test_split_title_year_missing_title():
    title, year = split_title_year(np.nan)
    assert pd.isna(title)
    assert year is None


def test_clean_movies_splits_titles_and_years(raw_data):
    movies = MovieDataTransform().clean_movies(raw_data["movies"])

    assert str(movies["year"].dtype) == "Int64"
    assert movies["title"].tolist() == ["Toy Story", "Malcolm X", "Texas, USA", "Untitled Project", "Heat"]
    assert movies.loc[movies["movieId"] == 3, "year"].item() == 1919
    assert pd.isna(movies.loc[movies["movieId"] == 4, "year"].item())
    assert movies["title_raw"].tolist() == raw_data["movies"]["title"].tolist()


def test_clean_movies_nulls_no_genres_sentinel(raw_data):
    movies = MovieDataTransform().clean_movies(raw_data["movies"])

    assert pd.isna(movies.loc[movies["movieId"] == 4, "genres"].item())
    assert movies.loc[movies["movieId"] == 2, "genres"].item() == ["Drama"]
    assert NO_GENRES not in explode_genres(movies)["genre"].dropna().tolist()


def test_explode_genres_one_row_per_genre():
    movies = MovieDataTransform().clean_movies(pd.DataFrame({
        "movieId": [7, 8],
        "title": ["Rush Hour (1998)", "Mystery Reel"],
        "genres": ["Action|Comedy", "(no genres listed)"],
    }))
    exploded = explode_genres(movies)

    action_comedy = exploded[exploded["movieId"] == 7]
    assert action_comedy["genre"].tolist() == ["Action", "Comedy"]
    assert (action_comedy["year"] == 1998).all()

    no_genre = exploded[exploded["movieId"] == 8]
    assert len(no_genre) == 1
    assert pd.isna(no_genre["genre"].item())


def test_convert_timestamps_epoch_and_strings():
    transformer = MovieDataTransform()

    epoch = transformer.convert_timestamps(pd.DataFrame({"timestamp": [0, 946684800]}))
    assert epoch["timestamp"].dt.year.tolist() == [1970, 2000]

    strings = transformer.convert_timestamps(pd.DataFrame({"timestamp": ["2005-04-02 23:53:47", "not a date"]}))
    assert strings["timestamp"].iloc[0] == pd.Timestamp("2005-04-02 23:53:47")
    assert pd.isna(strings["timestamp"].iloc[1])


def test_transform_cleans_every_table(raw_data):
    transformer = MovieDataTransform()
    data = transformer.transform(raw_data)

    assert set(data) == {"movies", "ratings", "tags", "links"}
    assert pd.api.types.is_datetime64_any_dtype(data["ratings"]["timestamp"])
    assert pd.api.types.is_datetime64_any_dtype(data["tags"]["timestamp"])
    assert data["tags"]["tag"].notna().all()
    assert len(data["tags"]) == 4
    # inputs are left untouched
    assert raw_data["movies"]["title"].iloc[0] == "Toy Story (1995)"

    assert "pre_movies" in transformer.quality_metrics
    assert transformer.quality_metrics["post_movies"]["missing_values"]["year"] == 1


def test_process_file_reads_all_chunks(csv_dir):
    ratings = DataProcess(chunk_size=3).process_file(str(csv_dir / "rating.csv"))
    assert len(ratings) == 8
    assert ratings.columns.tolist() == ["userId", "movieId", "rating", "timestamp"]


def test_process_file_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        DataProcess().process_file(str(tmp_path / "missing.csv"))


def test_extract_csv_files(csv_dir):
    extractor = MovieDataExtractor(chunk_size=2)
    data = extractor.extract_from_source(default_file_paths(csv_dir))

    assert data["movies"].shape == (5, 3)
    assert data["ratings"].shape == (8, 4)
    assert data["links"].shape == (5, 3)
    assert extractor.validate_data(data)


def test_extract_dat_files(tmp_path):
    path = tmp_path / "movies.dat"
    path.write_text("1::Toy Story (1995)::Animation|Children's|Comedy\n2::Jumanji (1995)::Adventure\n",
                    encoding="latin-1")

    data = MovieDataExtractor().extract_from_source({"movies": str(path)})

    assert data["movies"].columns.tolist() == ["movieId", "title", "genres"]
    assert data["movies"]["title"].tolist() == ["Toy Story (1995)", "Jumanji (1995)"]


def test_extract_unsupported_file_type(tmp_path):
    with pytest.raises(ValueError):
        MovieDataExtractor().extract_from_source({"movies": str(tmp_path / "movies.json")})


def test_validate_data_missing_column(raw_data):
    raw_data["ratings"] = raw_data["ratings"].drop(columns=["rating"])
    with pytest.raises(AssertionError, match="Missing columns in ratings"):
        MovieDataExtractor().validate_data(raw_data)


def test_validate_data_empty_table(raw_data):
    raw_data["tags"] = raw_data["tags"].iloc[0:0]
    with pytest.raises(AssertionError, match="tags dataframe is empty"):
        MovieDataExtractor().validate_data(raw_data)
