"""Prompt templates for planning and per-file generation"""

from typing import List

from appforge.schemas.generation import FileSpec, GenerationRequest, ProjectPlan


PLANNING_SYSTEM_PROMPT = (
    "You are a senior mobile engineer planning React Native and Expo projects. "
    "Respond with a single JSON object and nothing else."
)

FILE_SYSTEM_PROMPT = (
    "You are a senior mobile engineer writing production React Native and Expo code. "
    "Respond with the raw file content only."
)

PLANNING_PROMPT_TEMPLATE = """PLANNING_REQUEST: Create a detailed project structure for a {project_type} using {framework}.

Description: {description}
Features: {features}
Styling: {styling}

Please provide a JSON response with the following structure:
{{
  "name": "Project Name",
  "description": "Brief description",
  "framework": "{framework}",
  "files": [
    {{
      "path": "relative/path/to/file.tsx",
      "type": "file",
      "dependencies": ["list", "of", "dependencies"]
    }}
  ],
  "dependencies": ["react-native", "expo-router", ...],
  "devDependencies": ["@types/react", ...],
  "scripts": {{
    "dev": "expo start",
    "build": "expo build"
  }}
}}

Focus on creating a production-ready structure with proper separation of concerns.
"""

FILE_PROMPT_TEMPLATE = """FILE_GENERATION: Generate the complete content for: {path}

Project Context:
- Name: {name}
- Framework: {framework}
- Description: {description}

File Dependencies: {dependencies}
Completed Files: {completed}

Requirements:
1. Write production-ready, type-safe code
2. Follow React Native/Expo best practices
3. Include proper error handling
4. Use modern React patterns (hooks, functional components)
5. Ensure compatibility with the project structure
6. Include necessary imports and exports

Return only the file content, no explanations or markdown formatting.
"""


def build_planning_prompt(request: GenerationRequest) -> str:
    return PLANNING_PROMPT_TEMPLATE.format(
        project_type=request.project_type,
        framework=request.framework,
        description=request.description,
        features=", ".join(request.features) if request.features else "Standard features",
        styling=request.styling or "stylesheet",
    )


def build_file_prompt(spec: FileSpec, plan: ProjectPlan, completed_files: List[str]) -> str:
    dependencies = [dep for dep in spec.dependencies if dep]
    return FILE_PROMPT_TEMPLATE.format(
        path=spec.path,
        name=plan.name,
        framework=plan.framework,
        description=plan.description,
        dependencies=", ".join(dependencies) if dependencies else "None",
        completed=", ".join(completed_files),
    )
