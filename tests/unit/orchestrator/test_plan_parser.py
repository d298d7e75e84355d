"""
Unit Tests for plan parsing
"""
import pytest

from appforge.core.exceptions import PlanningFailureError
from appforge.modules.orchestrator.plan_parser import DEFAULT_PROJECT_NAME, parse_plan
from appforge.schemas.generation import GenerationRequest, SpecKind


REQUEST = GenerationRequest(description="A weather app", framework="react-native")


class TestParsePlan:
    """Tests for parse_plan"""

    def test_full_plan(self):
        plan = parse_plan({
            "name": "Weather",
            "description": "Forecasts",
            "framework": "expo",
            "files": [
                {"path": "app/index.tsx", "type": "file", "dependencies": ["api"]},
                {"path": "services", "type": "directory"},
            ],
            "dependencies": ["expo", "react"],
            "devDependencies": ["typescript"],
            "scripts": {"dev": "expo start"},
        }, REQUEST)

        assert plan.name == "Weather"
        assert plan.framework == "expo"
        assert [(f.path, f.kind) for f in plan.files] == [
            ("app/index.tsx", SpecKind.FILE),
            ("services", SpecKind.DIRECTORY),
        ]
        assert plan.files[0].dependencies == ["api"]
        assert [f.path for f in plan.file_specs] == ["app/index.tsx"]
        assert plan.dev_dependencies == ["typescript"]
        assert plan.scripts == {"dev": "expo start"}

    def test_missing_fields_default_from_request(self):
        plan = parse_plan({}, REQUEST)

        assert plan.name == DEFAULT_PROJECT_NAME
        assert plan.description == "A weather app"
        assert plan.framework == "react-native"
        assert plan.files == []
        assert plan.dependencies == []
        assert plan.scripts == {}

    def test_lenient_shapes(self):
        plan = parse_plan({
            "name": "   ",
            "files": ["App.tsx", {"kind": "directory", "path": "hooks"}, {"type": "file"}, 42],
            "dependencies": {"react": "19.0.0", "expo": "53"},
            "dev_dependencies": "typescript",
            "scripts": ["not", "a", "map"],
        }, REQUEST)

        assert plan.name == DEFAULT_PROJECT_NAME
        assert [(f.path, f.kind) for f in plan.files] == [
            ("App.tsx", SpecKind.FILE),
            ("hooks", SpecKind.DIRECTORY),
        ]
        assert plan.dependencies == ["react", "expo"]
        assert plan.dev_dependencies == ["typescript"]
        assert plan.scripts == {}

    def test_unknown_kind_is_file(self):
        plan = parse_plan({"files": [{"path": "x.ts", "type": "symlink"}]}, REQUEST)

        assert plan.files[0].kind == SpecKind.FILE

    def test_files_not_a_list(self):
        assert parse_plan({"files": "App.tsx"}, REQUEST).files == []

    @pytest.mark.parametrize("data", [None, [], "plan", 3])
    def test_non_mapping_rejected(self, data):
        with pytest.raises(PlanningFailureError):
            parse_plan(data, REQUEST)

    @pytest.mark.parametrize("raw,expected", [
        ("Todo / Notes", "Todo - Notes"),
        ("Work\\Home", "Work - Home"),
        ("../Todo", "Todo"),
        ("./", DEFAULT_PROJECT_NAME),
        ("..", DEFAULT_PROJECT_NAME),
        ("drafts.appforge.tmp", DEFAULT_PROJECT_NAME),
    ])
    def test_project_name_made_single_segment(self, raw, expected):
        assert parse_plan({"name": raw}, REQUEST).name == expected

    def test_unwritable_paths_skipped(self):
        plan = parse_plan({
            "files": [
                "../shared/utils.ts",
                {"path": "app/../../secrets.ts"},
                {"path": "./", "type": "directory"},
                "notes.appforge.tmp",
                "app/_layout.tsx",
                {"path": "/components/Button.tsx"},
            ],
        }, REQUEST)

        assert [f.path for f in plan.files] == ["app/_layout.tsx", "/components/Button.tsx"]
