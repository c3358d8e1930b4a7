### aggregation.py - Per-movie, per-genre and per-year statistics over the cleaned tables

import re
import time, logging
from collections import Counter
from typing import Dict, Iterable, Optional

import numpy as np
import pandas as pd
from wordcloud import STOPWORDS

from data_processing_part_1 import explode_genres

# Basic logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s- %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Prior vote counts of the weighted rating, one per granularity
MOVIE_PRIOR_COUNT = 500
GENRE_PRIOR_COUNT = 5000

TOKEN_PATTERN = re.compile(r"[\w']+")


def weighted_rating(mean_rating, votes, prior_count, prior_mean):
    """
    Bayesian average of a mean rating and a prior mean:

        wr = v / (v + m) * R + m / (v + m) * C

    Works on scalars, numpy arrays and pandas Series.
    """
    if isinstance(votes, pd.Series):
        votes = votes.astype(float)
    else:
        votes = np.asarray(votes, dtype=float)
    weight = votes / (votes + prior_count)
    return weight * mean_rating + (1 - weight) * prior_mean


def complete_years(frame: pd.DataFrame, year_col: str = 'year', value_col: str = 'count',
                   group_col: Optional[str] = None, fill_value=0) -> pd.DataFrame:
    """
    Fills the gaps of a yearly series with fill_value, keeping the existing values.

    With group_col every group is completed over the same overall year range,
    so all groups share one x axis.
    """
    if frame.empty:
        return frame.copy()

    years = range(int(frame[year_col].min()), int(frame[year_col].max()) + 1)
    if group_col is None:
        index = pd.Index(years, name=year_col)
        series = frame.set_index(year_col)[value_col]
    else:
        index = pd.MultiIndex.from_product([sorted(frame[group_col].unique()), years],
                                           names=[group_col, year_col])
        series = frame.set_index([group_col, year_col])[value_col]

    return series.reindex(index, fill_value=fill_value).reset_index()


def genre_tag_frequencies(tags: pd.DataFrame, movies: pd.DataFrame,
                          stopwords: Optional[Iterable[str]] = None) -> Dict[str, Counter]:
    """
    Word frequencies of user tags per genre.

    Tags are lowercased and split on non-word characters. Stop-words, single
    characters and the genre's own name are dropped, so "Sci-Fi" loses
    "sci-fi", "sci" and "fi". Genres left without any word are omitted.
    """
    stopwords = set(STOPWORDS if stopwords is None else stopwords)

    genres = explode_genres(movies)[['movieId', 'genre']].dropna()
    tagged = tags.dropna(subset=['tag']).merge(genres, on='movieId')

    frequencies = {}
    for genre, group in tagged.groupby('genre'):
        name = genre.lower()
        excluded = stopwords | {name} | set(TOKEN_PATTERN.findall(name))
        counter = Counter(
            word
            for tag in group['tag'].astype(str)
            for word in TOKEN_PATTERN.findall(tag.lower())
            if len(word) > 1 and word not in excluded
        )
        if counter:
            frequencies[genre] = counter
    return frequencies


class RatingAggregator:
    """Groups and joins the cleaned tables into the summary tables of the analysis"""
    def __init__(self, data: Dict[str, pd.DataFrame]):
        self.data = data
        self.logger = logging.getLogger(__name__)

    def _rating_years(self) -> pd.DataFrame:
        ratings = self.data['ratings'].dropna(subset=['timestamp'])
        return ratings.assign(year=ratings['timestamp'].dt.year.astype(int))

    def movie_rating_stats(self, prior_count: int = MOVIE_PRIOR_COUNT) -> pd.DataFrame:
        """Count, mean, min, max and weighted rating per movie, best first"""
        stats = self.data['ratings'].groupby('movieId')['rating'].agg(['count', 'mean', 'min', 'max']).reset_index()

        # ratings of movies missing from the movie table do not feed the prior
        movie_cols = [col for col in ('movieId', 'title', 'title_raw', 'year') if col in self.data['movies'].columns]
        stats = stats.merge(self.data['movies'][movie_cols], on='movieId', how='inner')

        # prior is the mean of the per-movie means
        prior_mean = stats['mean'].mean()
        stats['wr'] = weighted_rating(stats['mean'], stats['count'], prior_count, prior_mean)

        self.logger.info(f"Rating statistics for {len(stats)} movies, prior mean {prior_mean:.3f}")
        return stats.sort_values(['wr', 'count'], ascending=False, kind='mergesort').reset_index(drop=True)

    def best_movie_per_decade(self, stats: Optional[pd.DataFrame] = None) -> pd.DataFrame:
        """
        Highest weighted rating per decade; movies without a year are left out.

        Ties on wr go to the movie with more votes, then to the earlier row.
        """
        if stats is None:
            stats = self.movie_rating_stats()

        dated = stats.dropna(subset=['year']).copy()
        dated['decade'] = (dated['year'] // 10 * 10).astype(int)

        keys = ['wr', 'count'] if 'count' in dated.columns else ['wr']
        best = dated.sort_values(keys, ascending=False, kind='mergesort').groupby('decade').head(1)
        return best.sort_values('decade').reset_index(drop=True)

    def genre_popularity_by_year(self) -> pd.DataFrame:
        """Number of movies per (debut year, genre)"""
        exploded = explode_genres(self.data['movies']).dropna(subset=['genre', 'year'])
        counts = exploded.groupby(['year', 'genre']).size().reset_index(name='count')
        counts['year'] = counts['year'].astype(int)
        return counts

    def genre_rating_by_year(self, prior_count: int = GENRE_PRIOR_COUNT) -> pd.DataFrame:
        """Count, mean and weighted rating per (rating year, genre)"""
        genres = explode_genres(self.data['movies'])[['movieId', 'genre']].dropna()
        merged = self._rating_years().merge(genres, on='movieId')

        stats = merged.groupby(['year', 'genre'])['rating'].agg(['count', 'mean']).reset_index()
        prior_mean = stats['mean'].mean()
        stats['wr'] = weighted_rating(stats['mean'], stats['count'], prior_count, prior_mean)
        return stats

    def ratings_per_year(self) -> pd.DataFrame:
        """Number of ratings per calendar year, missing years filled with 0"""
        counts = self._rating_years().groupby('year').size().reset_index(name='count')
        return complete_years(counts)

    def tags_per_year(self) -> pd.DataFrame:
        """Number of tags per calendar year, missing years filled with 0"""
        tags = self.data['tags'].dropna(subset=['timestamp'])
        counts = tags.groupby(tags['timestamp'].dt.year.rename('year')).size().reset_index(name='count')
        return complete_years(counts)

    def dataset_overview(self) -> dict:
        """Headline numbers of the dataset"""
        ratings = self.data['ratings']
        movies = self.data['movies']
        n_users = ratings['userId'].nunique()
        n_movies = ratings['movieId'].nunique()

        overview = {
            'shapes': {key: df.shape for key, df in self.data.items()},
            'unique_users': n_users,
            'unique_movies': n_movies,
            'ratings_per_user': len(ratings) / n_users if n_users else 0.0,
            'ratings_per_movie': len(ratings) / n_movies if n_movies else 0.0,
            'sparsity': 1 - len(ratings) / (n_users * n_movies) if n_users and n_movies else 1.0,
            'movies_with_year': movies['year'].notna().mean() if len(movies) else 0.0,
        }
        if 'links' in self.data:
            linked = self.data['links'].dropna(subset=['imdbId'])['movieId']
            overview['movies_with_imdb_link'] = movies['movieId'].isin(linked).mean() if len(movies) else 0.0
        return overview

    def run_all(self) -> dict:
        """Compute every summary table of the analysis"""
        start_time = time.time()
        try:
            stats = self.movie_rating_stats()
            results = {
                'overview': self.dataset_overview(),
                'movie_stats': stats,
                'best_per_decade': self.best_movie_per_decade(stats),
                'genre_popularity': complete_years(self.genre_popularity_by_year(), group_col='genre'),
                'genre_ratings': self.genre_rating_by_year(),
                'ratings_per_year': self.ratings_per_year(),
            }
            if 'tags' in self.data:
                results['tags_per_year'] = self.tags_per_year()
                results['tag_frequencies'] = genre_tag_frequencies(self.data['tags'], self.data['movies'])

            self.logger.info(f"Aggregation completed in {time.time() - start_time:.2f} seconds")
            return results

        except Exception as e:
            self.logger.error(f"Aggregation failed: {str(e)}")
            raise
