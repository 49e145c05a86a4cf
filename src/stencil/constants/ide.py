"""IDE preset resources applied by setup scripts."""

from __future__ import annotations

from typing import Any


def kiro_preset(project_name: str) -> list[tuple[str, dict[str, Any]]]:
    """Kiro settings and task definitions."""
    return [
        (
            ".kiro/settings.json",
            {
                "editor.tabSize": 2,
                "editor.insertSpaces": True,
                "files.autoSave": "afterDelay",
                "kiro.projectName": project_name,
            },
        ),
        (
            ".kiro/tasks.json",
            {
                "version": "2.0.0",
                "tasks": [
                    {"label": "Start Application", "type": "shell", "command": "npm start", "group": "build"},
                ],
            },
        ),
    ]


def vscode_preset(project_name: str) -> list[tuple[str, dict[str, Any]]]:
    """VS Code settings, recommended extensions, and launch configuration."""
    return [
        (
            ".vscode/settings.json",
            {
                "editor.formatOnSave": True,
                "editor.codeActionsOnSave": {"source.fixAll.eslint": True},
                "editor.defaultFormatter": "esbenp.prettier-vscode",
            },
        ),
        (
            ".vscode/extensions.json",
            {
                "recommendations": [
                    "esbenp.prettier-vscode",
                    "dbaeumer.vscode-eslint",
                    "ms-vscode.vscode-typescript-next",
                ],
            },
        ),
        (
            ".vscode/launch.json",
            {
                "version": "0.2.0",
                "configurations": [
                    {
                        "name": f"Launch {project_name}",
                        "type": "node",
                        "request": "launch",
                        "program": "${workspaceFolder}/index.js",
                        "skipFiles": ["<node_internals>/**"],
                    }
                ],
            },
        ),
    ]


def cursor_preset(project_name: str) -> list[tuple[str, dict[str, Any]]]:
    return [(".cursor/config.json", {"useGitIgnore": True, "assistant": {"style": "pair-programmer"}})]


def windsurf_preset(project_name: str) -> list[tuple[str, dict[str, Any]]]:
    return [
        (
            ".windsurf/settings.json",
            {
                "editor.tabSize": 2,
                "files.autoSave": "onFocusChange",
                "windsurf.experimental.aiAssistance": True,
            },
        )
    ]


IDE_PRESETS = {
    "kiro": kiro_preset,
    "vscode": vscode_preset,
    "cursor": cursor_preset,
    "windsurf": windsurf_preset,
}
