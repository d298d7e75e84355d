"""
Integration step: the auxiliary files every generated project receives.

- package.json: slugified name, pinned versions from VERSION_TABLE
- app.json: Expo app descriptor, only for the expo framework
- README.md: summary listing every planned path
"""

import json
import re
from typing import Any, Dict, List

from appforge.core.logging_config import logger
from appforge.schemas.generation import Framework, ProjectPlan
from appforge.services.file_store import FileStore


VERSION_TABLE: Dict[str, str] = {
    "expo": "^53.0.0",
    "react": "19.0.0",
    "react-native": "0.79.1",
    "expo-router": "~5.0.2",
    "@types/react": "~19.0.10",
    "typescript": "~5.8.3",
}
DEFAULT_VERSION = "^1.0.0"
PROJECT_VERSION = "1.0.0"

MAIN_ENTRY: Dict[str, str] = {
    Framework.EXPO.value: "expo-router/entry",
}
DEFAULT_MAIN_ENTRY = "index.js"


def slugify(name: str) -> str:
    """Lowercase with each whitespace run replaced by a hyphen"""
    return re.sub(r"\s+", "-", name.lower())


def resolve_versions(packages: List[str]) -> Dict[str, str]:
    return {package: VERSION_TABLE.get(package, DEFAULT_VERSION) for package in packages}


def build_package_json(plan: ProjectPlan) -> Dict[str, Any]:
    return {
        "name": slugify(plan.name),
        "version": PROJECT_VERSION,
        "main": MAIN_ENTRY.get(plan.framework, DEFAULT_MAIN_ENTRY),
        "scripts": dict(plan.scripts),
        "dependencies": resolve_versions(plan.dependencies),
        "devDependencies": resolve_versions(plan.dev_dependencies),
    }


def build_app_json(plan: ProjectPlan) -> Dict[str, Any]:
    return {
        "expo": {
            "name": plan.name,
            "slug": slugify(plan.name),
            "version": PROJECT_VERSION,
            "orientation": "portrait",
            "userInterfaceStyle": "automatic",
            "newArchEnabled": True,
            "ios": {"supportsTablet": True},
            "web": {"bundler": "metro", "output": "single"},
            "plugins": ["expo-router", "expo-font"],
            "experiments": {"typedRoutes": True},
        }
    }


def build_readme(plan: ProjectPlan) -> str:
    structure = "\n".join(f"- {spec.path}" for spec in plan.files)
    return f"""# {plan.name}

{plan.description}

## Framework
{plan.framework}

## Getting Started

1. Install dependencies:
```bash
npm install
```

2. Start the development server:
```bash
npm run dev
```

## Project Structure

{structure}

## Generated by AI Agent
This project was automatically generated using an AI development agent.
"""


async def integrate_project(file_store: FileStore, root: str, plan: ProjectPlan) -> List[str]:
    """
    Write the integration files into root.

    Returns:
        Relative paths written
    """
    written = []

    await file_store.write_file(root, "package.json", json.dumps(build_package_json(plan), indent=2))
    written.append("package.json")

    if plan.framework == Framework.EXPO.value:
        await file_store.write_file(root, "app.json", json.dumps(build_app_json(plan), indent=2))
        written.append("app.json")

    await file_store.write_file(root, "README.md", build_readme(plan))
    written.append("README.md")

    logger.info(f"[Integration] Wrote {', '.join(written)} to {root}")
    return written
