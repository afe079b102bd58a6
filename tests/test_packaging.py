from pathlib import Path
import tomllib

ROOT = Path(__file__).resolve().parents[1]


def _project() -> dict:
    with (ROOT / "pyproject.toml").open("rb") as handle:
        return tomllib.load(handle)["project"]


def test_project_declares_runtime_stack() -> None:
    project = _project()

    assert project["name"] == "tunequeue"
    requirements = {entry.split(">")[0].split("=")[0] for entry in project["dependencies"]}
    assert requirements == {"spotipy", "Unidecode"}
    assert any(entry.startswith("pytest") for entry in project["optional-dependencies"]["test"])


def test_long_description_is_not_taken_from_design_documents() -> None:
    readme = _project().get("readme")

    assert readme is None or Path(readme).name.lower().startswith("readme")
