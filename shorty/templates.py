"""Parameterised alias templates kept in a YAML registry

A template pattern marks its parameters with braces, e.g.
``git clone {url} {directory}``. Using a template fills the placeholders and
adds the result as a new alias.
"""

import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from shorty.errors import TemplateError
from shorty.paths import get_shorty_dir

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\}")
TEMPLATE_TAG = "template"


@dataclass
class TemplateParameter:
    name: str
    description: str = ""
    default_value: Optional[str] = None
    required: bool = True
    validation_pattern: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "TemplateParameter":
        return cls(
            name=str(data["name"]),
            description=data.get("description", ""),
            default_value=data.get("default_value"),
            required=bool(data.get("required", True)),
            validation_pattern=data.get("validation_pattern"),
        )


@dataclass
class Template:
    """Represents a template with its parameters and usage count"""
    name: str
    pattern: str
    description: str = "No description"
    category: str = "general"
    parameters: List[TemplateParameter] = field(default_factory=list)
    created_at: str = ""
    usage_count: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "Template":
        return cls(
            name=str(data["name"]),
            pattern=str(data["pattern"]),
            description=data.get("description") or "No description",
            category=data.get("category") or "general",
            parameters=[TemplateParameter.from_dict(p) for p in data.get("parameters", [])],
            created_at=str(data.get("created_at", "")),
            usage_count=int(data.get("usage_count", 0)),
        )

    def example_params(self) -> str:
        """Parameters in --params syntax, using defaults where known"""
        return ",".join(f"{p.name}={p.default_value or 'value'}" for p in self.parameters)


def extract_parameters(pattern: str) -> List[TemplateParameter]:
    """Required parameters for each distinct placeholder, in order"""
    names = []
    for name in PLACEHOLDER_PATTERN.findall(pattern):
        if name not in names:
            names.append(name)
    return [TemplateParameter(name=name, description=f"Parameter for {name}") for name in names]


def parse_params(raw: Optional[str]) -> Dict[str, str]:
    """Parse 'key=value,key2=value2'"""
    params = {}
    if not raw:
        return params
    for pair in raw.split(","):
        if not pair.strip():
            continue
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise TemplateError(f"Invalid parameter '{pair}'. Use key=value")
        params[key.strip()] = value.strip()
    return params


def sanitize_alias_name(value: str) -> str:
    return "".join(ch for ch in value if ch.isalnum() or ch == "_").lower()


def default_templates() -> List[Template]:
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    return [
        Template(
            name="git_clone",
            pattern="git clone {url} {directory}",
            description="Clone a Git repository",
            category="git",
            parameters=[
                TemplateParameter("url", "Git repository URL", None, True, r"^https?://.*\.git$|^git@.*\.git$"),
                TemplateParameter("directory", "Local directory name", ".", False),
            ],
            created_at=timestamp,
        ),
        Template(
            name="docker_run",
            pattern="docker run -it --rm {options} {image} {command}",
            description="Run a Docker container",
            category="docker",
            parameters=[
                TemplateParameter("options", "Docker run options (e.g., -p 8080:80)", "", False),
                TemplateParameter("image", "Docker image name"),
                TemplateParameter("command", "Command to run in container", "/bin/bash", False),
            ],
            created_at=timestamp,
        ),
        Template(
            name="npm_script",
            pattern="NODE_ENV={env} npm run {script}",
            description="Run npm script with environment",
            category="nodejs",
            parameters=[
                TemplateParameter(
                    "env", "Node environment (development, production, test)", "development", False,
                    r"^(development|production|test)$",
                ),
                TemplateParameter("script", "npm script name"),
            ],
            created_at=timestamp,
        ),
        Template(
            name="ssh_tunnel",
            pattern="ssh -L {local_port}:localhost:{remote_port} {user}@{host} -N",
            description="Create SSH tunnel",
            category="network",
            parameters=[
                TemplateParameter("local_port", "Local port number", None, True, r"^\d+$"),
                TemplateParameter("remote_port", "Remote port number", None, True, r"^\d+$"),
                TemplateParameter("user", "SSH username"),
                TemplateParameter("host", "SSH host"),
            ],
            created_at=timestamp,
        ),
    ]


class TemplateManager:
    """Manage alias templates from a YAML file"""

    def __init__(self, registry_path: Optional[Path] = None):
        self.registry_path = registry_path or get_shorty_dir() / "templates.yaml"
        self.templates: List[Template] = self.load()

    def load(self) -> List[Template]:
        if not self.registry_path.exists():
            self.templates = default_templates()
            self.save()
            return self.templates

        with open(self.registry_path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise TemplateError(f"Invalid templates file {self.registry_path}: {e}")
        return [Template.from_dict(item) for item in data.get("templates", [])]

    def save(self) -> None:
        self.registry_path.parent.mkdir(parents=True, exist_ok=True)
        data = {"version": "1.0", "templates": [asdict(t) for t in self.templates]}
        with open(self.registry_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    def get_template(self, name: str) -> Template:
        for template in self.templates:
            if template.name == name:
                return template
        raise TemplateError(f"Template '{name}' not found")

    def list_templates(self, category: Optional[str] = None) -> List[Template]:
        """List templates, optionally filtered by category"""
        templates = self.templates
        if category:
            templates = [t for t in templates if t.category == category]
        return sorted(templates, key=lambda t: (t.category, t.name))

    def add(
        self,
        name: str,
        pattern: str,
        description: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Template:
        if any(t.name == name for t in self.templates):
            raise TemplateError(
                f"Template '{name}' already exists. Use a different name or remove the existing template first."
            )
        template = Template(
            name=name,
            pattern=pattern,
            description=description or "No description",
            category=category or "general",
            parameters=extract_parameters(pattern),
            created_at=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        )
        self.templates.append(template)
        self.save()
        return template

    def remove(self, name: str) -> None:
        template = self.get_template(name)
        self.templates.remove(template)
        self.save()

    def update(
        self,
        name: str,
        pattern: Optional[str] = None,
        description: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[str]:
        """Apply the given changes, returning the names of changed fields"""
        template = self.get_template(name)
        changes = []
        if pattern is not None:
            template.pattern = pattern
            template.parameters = extract_parameters(pattern)
            changes.append("pattern")
        if description is not None:
            template.description = description
            changes.append("description")
        if category is not None:
            template.category = category
            changes.append("category")
        if changes:
            self.save()
        return changes

    def render(self, template: Template, params: Dict[str, str]) -> str:
        """Fill the pattern's placeholders, validating each value"""
        for param in template.parameters:
            if param.required and param.name not in params:
                raise TemplateError(
                    f"Required parameter '{param.name}' is missing. Description: {param.description}"
                )

        command = template.pattern
        for param in template.parameters:
            if param.name in params:
                value = params[param.name]
            elif param.default_value is not None:
                value = param.default_value
            else:
                continue

            if param.validation_pattern:
                try:
                    matched = re.search(param.validation_pattern, value)
                except re.error as e:
                    raise TemplateError(f"Invalid validation pattern for '{param.name}': {e}")
                if not matched:
                    raise TemplateError(
                        f"Parameter '{param.name}' value '{value}' doesn't match pattern '{param.validation_pattern}'"
                    )
            placeholder = f"{{{param.name}}}"
            if value:
                command = command.replace(placeholder, value)
            else:
                # an empty value takes the space before it along
                command = re.sub(r"[ \t]?" + re.escape(placeholder), "", command)

        remaining = [p.name for p in extract_parameters(command)]
        if remaining:
            raise TemplateError(f"Missing values for parameters: {', '.join(remaining)}")
        return command.strip()

    def alias_name_for(self, template: Template, params: Dict[str, str]) -> str:
        name = template.name
        if template.parameters:
            value = params.get(template.parameters[0].name)
            suffix = sanitize_alias_name(value) if value else ""
            if suffix:
                name = f"{name}_{suffix}"
        return name

    def use(
        self,
        manager,
        name: str,
        params: Dict[str, str],
        alias_name: Optional[str] = None,
        overwrite: bool = False,
    ) -> Tuple[str, str]:
        """Create an alias from a template, returning (alias name, command)"""
        template = self.get_template(name)
        command = self.render(template, params)
        final_name = alias_name or self.alias_name_for(template, params)

        manager.add(
            final_name,
            command,
            note=f"Generated from template: {template.name}",
            tags=[template.category, TEMPLATE_TAG],
            overwrite=overwrite,
        )
        template.usage_count += 1
        self.save()
        logger.debug("Template %s used %d times", template.name, template.usage_count)
        return final_name, command
