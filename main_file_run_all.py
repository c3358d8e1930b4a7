### main.py - Main script to run the entire movie ratings analysis

import os
import logging
import time
import traceback
from pathlib import Path

import pandas as pd

# Import from our modules
from data_processing_part_1 import MovieDataExtractor, MovieDataTransform, default_file_paths
from aggregation_part_2 import RatingAggregator
from visualization_part_3 import Visualizations

# Basic logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s- %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

DATA_DIR = Path(os.environ.get("MOVIELENS_DIR", "data/raw/ml-20m"))
TOP_N = 10


def print_results(results):
    """Print the summary tables to the console"""
    print("\nDataset overview:")
    for key, value in results['overview'].items():
        print(f"{key:22}: {value}")

    print(f"\nTop {TOP_N} movies by weighted rating:")
    print(results['movie_stats'][['title', 'year', 'count', 'mean', 'wr']].head(TOP_N).to_string(index=False))

    print("\nBest movie per decade:")
    print(results['best_per_decade'][['decade', 'title', 'year', 'count', 'mean', 'wr']].to_string(index=False))

    print("\nBest rated genre per year:")
    genre_ratings = results['genre_ratings']
    best_genres = genre_ratings.sort_values('wr', ascending=False).groupby('year').head(1).sort_values('year')
    print(best_genres.to_string(index=False))


def full_pipeline(data_dir=DATA_DIR, show=True):
    """
    Run the complete analysis: load, clean, aggregate and plot
    """
    start_time = time.time()
    try:
        # Step 1: Load
        logger.info("STEP 1: LOADING DATA")
        extractor = MovieDataExtractor(chunk_size=100000)
        raw_data = extractor.extract_from_source(default_file_paths(data_dir))
        extractor.validate_data(raw_data)

        # Step 2: Clean
        logger.info("STEP 2: CLEANING DATA")
        transformer = MovieDataTransform()
        data = transformer.transform(raw_data)

        # Step 3: Aggregate
        logger.info("STEP 3: AGGREGATING")
        results = RatingAggregator(data).run_all()

        with pd.option_context('display.width', 120):
            print_results(results)

        # Step 4: Plot
        logger.info("STEP 4: PLOTTING")
        visualizer = Visualizations(show=show)
        visualizer.plot_rating_distribution(data['ratings'])
        visualizer.plot_top_movies(results['movie_stats'], n=TOP_N)
        visualizer.plot_activity(results['ratings_per_year'], title="Ratings per Year")
        visualizer.plot_genre_trends(results['genre_popularity'], title="Movies Released per Genre")
        visualizer.plot_genre_trends(results['genre_ratings'], value_col='wr', window=3,
                                     title="Weighted Rating per Genre")
        if 'tag_frequencies' in results:
            visualizer.plot_activity(results['tags_per_year'], title="Tags per Year")
            visualizer.plot_genre_wordclouds(results['tag_frequencies'])

        logger.info(f"Total pipeline time: {time.time() - start_time:.2f} seconds")
        return results

    except Exception as e:
        logger.error(f"Error in pipeline: {str(e)}")
        logger.error(traceback.format_exc())
        return None


if __name__ == "__main__":
    results = full_pipeline()
