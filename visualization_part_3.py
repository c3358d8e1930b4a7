### visualization.py - Line charts, bar charts and word clouds of the aggregated tables

import math
import logging
from typing import Dict, Optional

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from wordcloud import WordCloud

# Basic logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s- %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def _movie_labels(movies: pd.DataFrame) -> pd.Series:
    """
    One distinct label per movie row.

    Titles repeat once the year is split off (several "Hamlet" releases), and
    seaborn merges equal category labels into one bar.
    """
    if "title_raw" in movies.columns:
        labels = movies["title_raw"].astype(str)
    else:
        years = movies["year"].astype("string").fillna("?")
        labels = movies["title"].astype(str) + " (" + years + ")"
    repeated = labels.duplicated(keep=False)
    if repeated.any() and "movieId" in movies.columns:
        labels = labels.where(~repeated, labels + " #" + movies["movieId"].astype(str))
    return labels


class Visualizations:
    """Class to plot the aggregated tables with matplotlib/seaborn"""
    def __init__(self, show: bool = True):
        self.show = show
        self.logger = logging.getLogger(__name__)

    def _finish(self, fig):
        fig.tight_layout()
        if self.show:
            plt.show()
        return fig

    def plot_rating_distribution(self, ratings: pd.DataFrame):
        fig, ax = plt.subplots(figsize=(10, 6))
        # one bin per half star
        sns.histplot(data=ratings, x="rating", bins=np.arange(0.25, 5.5, 0.5), color="green", ax=ax)
        ax.set_title("Distribution of Ratings")
        ax.set_xlabel("Rating")
        ax.set_ylabel("Count")
        return self._finish(fig)

    def plot_top_movies(self, stats: pd.DataFrame, n: int = 10, by: str = "wr"):
        """Horizontal bars of the n best movies, by weighted rating or by vote count"""
        top = stats.nlargest(n, by)
        fig, ax = plt.subplots(figsize=(10, 6))
        sns.barplot(x=top[by].values, y=_movie_labels(top).values, color="red", ax=ax)
        ax.set_title(f"Top {n} Movies by {'Weighted Rating' if by == 'wr' else by.title()}")
        ax.set_xlabel("Weighted Rating" if by == "wr" else by)
        return self._finish(fig)

    def plot_activity(self, frame: pd.DataFrame, value_col: str = "count",
                      year_col: str = "year", title: str = "Ratings per Year"):
        fig, ax = plt.subplots(figsize=(10, 6))
        sns.lineplot(data=frame, x=year_col, y=value_col, marker="o", ax=ax)
        ax.set_title(title)
        ax.set_xlabel("Year")
        ax.set_ylabel(value_col.title())
        ax.grid(True)
        return self._finish(fig)

    def plot_genre_trends(self, frame: pd.DataFrame, value_col: str = "count", year_col: str = "year",
                          genre_col: str = "genre", window: int = 5, col_wrap: int = 4,
                          title: Optional[str] = None):
        """
        One line chart per genre: the yearly values and a smoothed trend.

        The trend is a centred rolling mean over `window` years, computed per genre.
        """
        data = frame.sort_values([genre_col, year_col]).copy()
        data["trend"] = data.groupby(genre_col)[value_col].transform(
            lambda s: s.rolling(window, center=True, min_periods=1).mean()
        )

        grid = sns.FacetGrid(data, col=genre_col, col_wrap=col_wrap, sharey=False, height=2.5, aspect=1.4)
        grid.map_dataframe(sns.lineplot, x=year_col, y=value_col, color="steelblue", alpha=0.5)
        grid.map_dataframe(sns.lineplot, x=year_col, y="trend", color="red")
        grid.set_titles("{col_name}")
        grid.set_axis_labels("Year", value_col)
        if title:
            grid.figure.suptitle(title)
        return self._finish(grid.figure)

    def plot_genre_wordclouds(self, frequencies: Dict[str, Dict[str, int]], max_genres: int = 12,
                              ncols: int = 3, max_words: int = 100):
        """Grid of tag word clouds, one per genre, most tagged genres first"""
        genres = sorted(frequencies, key=lambda g: sum(frequencies[g].values()), reverse=True)[:max_genres]
        if not genres:
            self.logger.warning("No tag frequencies to draw")
            return None

        nrows = math.ceil(len(genres) / ncols)
        fig, axes = plt.subplots(nrows, ncols, figsize=(5 * ncols, 3 * nrows), squeeze=False)
        for ax, genre in zip(axes.flat, genres):
            cloud = WordCloud(width=800, height=400, background_color="white", max_words=max_words)
            cloud.generate_from_frequencies(dict(frequencies[genre]))
            ax.imshow(cloud, interpolation="bilinear")
            ax.set_title(genre)
        for ax in axes.flat:
            ax.axis("off")
        return self._finish(fig)
