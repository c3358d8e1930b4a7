import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest
import matplotlib.pyplot as plt

from data_processing_part_1 import MovieDataTransform, FILE_NAMES

# 1996-01-01, 1998-01-01 and 2000-01-01, plus a few weeks
TS_1996 = 820454400 + 86400 * 30
TS_1998 = 883612800 + 86400 * 30
TS_2000 = 946684800 + 86400 * 30


@pytest.fixture
def raw_data():
    movies = pd.DataFrame({
        "movieId": [1, 2, 3, 4, 5],
        "title": ["Toy Story (1995)", "Malcolm X (1992)", "Texas, USA (1919-1929)",
                  "Untitled Project", "Heat (1995)"],
        "genres": ["Adventure|Animation|Children|Comedy|Fantasy", "Drama", "Documentary",
                   "(no genres listed)", "Action|Crime|Thriller"],
    })
    ratings = pd.DataFrame({
        "userId": [1, 2, 3, 1, 2, 1, 3, 3],
        "movieId": [1, 1, 1, 2, 2, 5, 5, 4],
        "rating": [5.0, 4.0, 4.5, 3.0, 3.5, 4.0, 5.0, 2.0],
        "timestamp": [TS_1996, TS_1996, TS_1998, TS_1998, TS_2000, TS_2000, TS_2000, TS_2000],
    })
    tags = pd.DataFrame({
        "userId": [1, 2, 1, 3, 2],
        "movieId": [1, 1, 5, 1, 2],
        "tag": ["pixar", "Pixar animation", "heist crime classic", "the funny", None],
        "timestamp": [TS_1996, TS_1998, TS_2000, TS_1998, TS_1998],
    })
    links = pd.DataFrame({
        "movieId": [1, 2, 3, 4, 5],
        "imdbId": [114709, 104797, np.nan, np.nan, 113277],
        "tmdbId": [862, 1883, np.nan, np.nan, 949],
    })
    return {"movies": movies, "ratings": ratings, "tags": tags, "links": links}


@pytest.fixture
def clean_data(raw_data):
    return MovieDataTransform().transform(raw_data)


@pytest.fixture
def csv_dir(tmp_path, raw_data):
    for key, df in raw_data.items():
        df.to_csv(tmp_path / FILE_NAMES[key], index=False)
    return tmp_path


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")
