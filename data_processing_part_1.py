### data_processing.py - Handles data loading, validation and cleaning of the MovieLens tables

import re
import time, logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

# Basic logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s- %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Column sets of the four MovieLens tables
EXPECTED_COLUMNS = {
    'movies': ['movieId', 'title', 'genres'],
    'ratings': ['userId', 'movieId', 'rating', 'timestamp'],
    'tags': ['userId', 'movieId', 'tag', 'timestamp'],
    'links': ['movieId', 'imdbId', 'tmdbId'],
}

# File names used by the ml-20m export
FILE_NAMES = {
    'movies': 'movie.csv',
    'ratings': 'rating.csv',
    'tags': 'tag.csv',
    'links': 'link.csv',
}

NO_GENRES = "(no genres listed)"

# "Title (1995)", "Title (1919-1929)" and the open range "Title (2007-)"
TITLE_YEAR_PATTERN = re.compile(
    r"^(?P<title>.*?)\s*\((?P<year>\d{4})(?:\s*[-–]\s*(?:\d{4})?)?\)\s*$"
)


def default_file_paths(data_dir) -> Dict[str, str]:
    """Map every table key to its csv file under data_dir"""
    data_dir = Path(data_dir)
    return {key: str(data_dir / name) for key, name in FILE_NAMES.items()}


def split_title_year(raw) -> Tuple[object, Optional[int]]:
    """
    Splits a raw MovieLens title into (title, year).

    The year is the first one of a range. When the title has no trailing
    "(YYYY)" the title is returned unchanged and the year is None.
    """
    if not isinstance(raw, str):
        return raw, None
    match = TITLE_YEAR_PATTERN.match(raw)
    if match is None:
        return raw, None
    return match.group('title').strip(), int(match.group('year'))


def _normalize_genres(value) -> Optional[List[str]]:
    if not isinstance(value, str):
        return None
    genres = [g.strip() for g in value.split('|')]
    genres = [g for g in genres if g and g != NO_GENRES]
    return genres or None


def explode_genres(movies: pd.DataFrame) -> pd.DataFrame:
    """One row per (movie, genre). Movies without genres keep one row with a null genre."""
    exploded = movies.explode('genres').rename(columns={'genres': 'genre'})
    return exploded.reset_index(drop=True)


class DataProcess:
    """
    Handles efficient loading of the movie data files.
    Uses chunking to manage memory when reading large files.
    """
    def __init__(self, chunk_size: int = 500000):
        # Chunk size can be adjusted based on available system memory
        self.chunk_size = chunk_size

    def process_file(self, filename: str, sep: str = ',', **read_kwargs) -> pd.DataFrame:
        """
        Reads a delimited data file in chunks and combines them.

        Args:
            filename: Path to the data file
            sep: Separator used in the file (',' for CSV, '::' for DAT files)
            read_kwargs: Extra arguments passed on to pandas.read_csv

        Returns:
            Complete DataFrame after reading all chunks
        """
        # multi-character separators need the python parser
        if len(sep) > 1:
            read_kwargs.setdefault('engine', 'python')

        chunks = []
        try:
            for chunk in pd.read_csv(filename, sep=sep, chunksize=self.chunk_size, **read_kwargs):
                chunks.append(chunk)

            if not chunks:
                return pd.read_csv(filename, sep=sep, **read_kwargs)
            return pd.concat(chunks, ignore_index=True)

        except Exception as e:
            logger.error(f"Error processing file {filename}: {e}")
            raise


class MovieDataExtractor:
    """Reads the raw MovieLens tables and checks their structure"""
    def __init__(self, chunk_size: int = 500000):
        self.processor = DataProcess(chunk_size=chunk_size)
        self.logger = logging.getLogger(__name__)

    def validate_data(self, data: Dict[str, pd.DataFrame]) -> bool:
        """Validate the structure/content of the extracted tables"""
        try:
            for key, df in data.items():
                if key not in EXPECTED_COLUMNS:
                    self.logger.warning(f"No schema known for {key}, skipping validation")
                    continue

                missing_cols = [col for col in EXPECTED_COLUMNS[key] if col not in df.columns]
                if missing_cols:
                    self.logger.error(f"Missing columns in {key}: {missing_cols}")
                    self.logger.error(f"Actual columns: {df.columns.tolist()}")

                assert not missing_cols, f"Missing columns in {key}"
                assert not df.empty, f"{key} dataframe is empty"

            return True

        except AssertionError as e:
            self.logger.error(f"Validation failed: {str(e)}")
            raise

    def extract_from_source(self, file_paths: Dict[str, str]) -> Dict[str, pd.DataFrame]:
        """Extract every table listed in file_paths, keyed like the input"""
        start_time = time.time()
        try:
            file_configs = {
                'dat': {'sep': '::', 'header': None, 'encoding': 'latin-1'},
                'csv': {'sep': ','},
            }

            data = {}
            for key, filepath in file_paths.items():
                file_type = Path(filepath).suffix.lstrip('.').lower()
                if file_type not in file_configs:
                    raise ValueError(f"Unsupported file type for {key}: {filepath}")
                config = file_configs[file_type].copy()

                # DAT files carry no header
                if file_type == 'dat':
                    config['names'] = EXPECTED_COLUMNS[key]

                data[key] = self.processor.process_file(filepath, **config)
                self.logger.info(f"Processed {key}: {data[key].shape}")

            self.logger.info(f"Extraction completed in {time.time() - start_time:.2f} seconds")
            return data

        except Exception as e:
            self.logger.error(f"Extraction failed: {str(e)}")
            raise


class MovieDataTransform:
    """Handles data transformation and cleaning"""
    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.quality_metrics = {}

    def check_data_quality(self, data: pd.DataFrame, stage: str = "pre") -> dict:
        """Record missing values, unique counts and memory usage of a table at a given stage"""
        metrics = {
            'missing_values': data.isnull().sum().to_dict(),
            'unique_counts': {col: data[col].nunique() for col in data.columns
                              if not data[col].map(lambda v: isinstance(v, list)).any()},
            'memory_usage': data.memory_usage(deep=True).sum() / 1024**2  # MB
        }
        self.quality_metrics[stage] = metrics
        return metrics

    def clean_movies(self, movies: pd.DataFrame) -> pd.DataFrame:
        """Split titles into (title, year) and turn the genre strings into lists"""
        movies = movies.copy()
        movies['title_raw'] = movies['title']

        parts = movies['title_raw'].map(split_title_year)
        movies['title'] = parts.map(lambda p: p[0])
        movies['year'] = pd.array(parts.map(lambda p: p[1]).tolist(), dtype='Int64')

        movies['genres'] = movies['genres'].map(_normalize_genres)

        missing_years = movies['year'].isna().sum()
        if missing_years:
            self.logger.info(f"{missing_years} titles without a parsable year")
        return movies

    def convert_timestamps(self, frame: pd.DataFrame, column: str = 'timestamp') -> pd.DataFrame:
        """Convert epoch seconds or date strings to datetimes, unparsable values become NaT"""
        frame = frame.copy()
        if pd.api.types.is_numeric_dtype(frame[column]):
            frame[column] = pd.to_datetime(frame[column], unit='s', errors='coerce')
        else:
            frame[column] = pd.to_datetime(frame[column], errors='coerce')
        return frame

    def transform(self, data: Dict[str, pd.DataFrame]) -> Dict[str, pd.DataFrame]:
        """Applies all cleaning steps and returns the cleaned tables"""
        start_time = time.time()
        try:
            transformed_data = {}
            for key, df in data.items():
                self.check_data_quality(df, f"pre_{key}")

                if key == 'movies':
                    df = self.clean_movies(df)
                elif key in ('ratings', 'tags'):
                    df = self.convert_timestamps(df)
                    if key == 'tags':
                        df = df.dropna(subset=['tag']).reset_index(drop=True)
                else:
                    df = df.copy()

                transformed_data[key] = df
                self.check_data_quality(df, f"post_{key}")

            self.logger.info(f"Transformation completed in {time.time() - start_time:.2f} seconds")
            return transformed_data

        except Exception as e:
            self.logger.error(f"Transformation failed: {str(e)}")
            raise
