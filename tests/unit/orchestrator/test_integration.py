"""
Unit Tests for project integration files
"""
import json

import pytest

from appforge.modules.orchestrator.integration import (
    DEFAULT_VERSION,
    build_app_json,
    build_package_json,
    build_readme,
    integrate_project,
    resolve_versions,
    slugify,
)
from appforge.schemas.generation import FileSpec, ProjectPlan


def make_plan(framework="expo", **kwargs):
    defaults = dict(
        name="My Todo  App",
        description="Keeps track of things",
        framework=framework,
        files=[FileSpec(path="app/index.tsx"), FileSpec(path="components/Row.tsx")],
        dependencies=["expo", "react", "lodash"],
        dev_dependencies=["typescript"],
        scripts={"dev": "expo start"},
    )
    defaults.update(kwargs)
    return ProjectPlan(**defaults)


class TestPackageJson:
    """Tests for package.json generation"""

    def test_slugify(self):
        assert slugify("My Todo  App") == "my-todo-app"
        assert slugify("Already-Slug") == "already-slug"

    def test_versions_from_table(self):
        assert resolve_versions(["react", "lodash"]) == {"react": "19.0.0", "lodash": DEFAULT_VERSION}

    def test_package_json(self):
        package = build_package_json(make_plan())

        assert package == {
            "name": "my-todo-app",
            "version": "1.0.0",
            "main": "expo-router/entry",
            "scripts": {"dev": "expo start"},
            "dependencies": {"expo": "^53.0.0", "react": "19.0.0", "lodash": "^1.0.0"},
            "devDependencies": {"typescript": "~5.8.3"},
        }

    def test_non_expo_entry(self):
        assert build_package_json(make_plan(framework="react-native"))["main"] == "index.js"


class TestAppJsonAndReadme:
    """Tests for app.json and README.md"""

    def test_app_json(self):
        app = build_app_json(make_plan())["expo"]

        assert app["name"] == "My Todo  App"
        assert app["slug"] == "my-todo-app"
        assert app["plugins"] == ["expo-router", "expo-font"]

    def test_readme_lists_every_planned_path(self):
        readme = build_readme(make_plan())

        assert readme.startswith("# My Todo  App\n")
        assert "- app/index.tsx" in readme
        assert "- components/Row.tsx" in readme
        assert "## Framework\nexpo" in readme


class TestIntegrateProject:
    """Tests for integrate_project"""

    @pytest.mark.asyncio
    async def test_expo_project(self, flat_store):
        root = await flat_store.create_project("todo")

        written = await integrate_project(flat_store, root, make_plan())

        assert written == ["package.json", "app.json", "README.md"]
        package = json.loads(await flat_store.read_file(root, "package.json"))
        assert package["name"] == "my-todo-app"

    @pytest.mark.asyncio
    async def test_react_native_project_has_no_app_json(self, flat_store):
        root = await flat_store.create_project("todo")

        written = await integrate_project(flat_store, root, make_plan(framework="react-native"))

        assert written == ["package.json", "README.md"]
        assert not await flat_store.file_exists(root, "app.json")
