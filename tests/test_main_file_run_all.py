from main_file_run_all import full_pipeline


def test_full_pipeline_from_csv_files(csv_dir, capsys):
    results = full_pipeline(data_dir=csv_dir, show=False)

    assert results is not None
    assert results["best_per_decade"]["title"].tolist() == ["Toy Story"]
    assert results["ratings_per_year"]["count"].sum() == 8
    assert "Animation" in results["tag_frequencies"]

    out = capsys.readouterr().out
    assert "Best movie per decade" in out
    assert "Toy Story" in out


def test_full_pipeline_missing_directory(tmp_path):
    assert full_pipeline(data_dir=tmp_path / "nowhere", show=False) is None
