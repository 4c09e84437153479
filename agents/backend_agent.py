"""Backend developer agent - Node.js API design and delivery."""

import re

from schemas.phase_results import BackendResult, DatabaseResult, Endpoint
from scaffolding.templates import DATABASE_DRIVERS, package_json, railway_json, server_js

from .base import BaseAgent, extract_files
from .prompts import BACKEND_CODE_PROMPT, BACKEND_PROMPT

BACKEND_BRANCH = "feature-backend-api-implementation"

ROUTE_PATTERN = re.compile(r"app\.(get|post|put|delete)\(['\"`]([^'\"`]+)")

BASE_ENDPOINTS = [
    Endpoint(method="POST", path="/api/auth/register"),
    Endpoint(method="POST", path="/api/auth/login"),
]

# feature -> keywords in the requirements that imply it
FEATURE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "data_management": ("crud", "manage", "track", "create", "list"),
    "search": ("search", "filter"),
    "file_handling": ("upload", "file", "image", "photo"),
    "communication": ("chat", "message", "messaging"),
}

# (category, keywords, resource name), first match wins
RESOURCE_CATEGORIES: list[tuple[str, tuple[str, ...], str]] = [
    ("computation", ("calculator", "calculate"), "calculations"),
    ("productivity", ("task", "todo", "project"), "tasks"),
    ("social", ("social", "dating", "friend", "post"), "posts"),
    ("ecommerce", ("shop", "product", "ecommerce", "e-commerce"), "products"),
    ("entertainment", ("game", "video", "music"), "content"),
    ("utility", ("tool", "convert"), "tools"),
]


def detect_features(text: str) -> list[str]:
    lowered = text.lower()
    return [feature for feature, keywords in FEATURE_KEYWORDS.items() if any(k in lowered for k in keywords)]


def infer_resource_name(text: str) -> str:
    lowered = text.lower()
    for _, keywords, resource in RESOURCE_CATEGORIES:
        if any(k in lowered for k in keywords):
            return resource
    return "items"


def feature_endpoints(requirements: str) -> list[Endpoint]:
    """Base auth endpoints plus those implied by the requirements' features."""
    endpoints = list(BASE_ENDPOINTS)
    features = detect_features(requirements)

    if "data_management" in features:
        resource = infer_resource_name(requirements)
        endpoints += [
            Endpoint(method="GET", path=f"/api/{resource}"),
            Endpoint(method="POST", path=f"/api/{resource}"),
            Endpoint(method="PUT", path=f"/api/{resource}/:id"),
            Endpoint(method="DELETE", path=f"/api/{resource}/:id"),
        ]
    if "search" in features:
        endpoints.append(Endpoint(method="GET", path="/api/search"))
    if "file_handling" in features:
        endpoints += [
            Endpoint(method="POST", path="/api/upload"),
            Endpoint(method="GET", path="/api/files/:id"),
        ]
    if "communication" in features:
        endpoints += [
            Endpoint(method="GET", path="/api/messages"),
            Endpoint(method="POST", path="/api/messages"),
        ]
    return endpoints


class BackendDeveloperAgent(BaseAgent):
    """Designs the API, generates the Node.js code and opens the backend PR."""

    display_name = "Backend Developer AI"

    def default_system_prompt(self) -> str:
        return BACKEND_PROMPT

    def create_api_architecture(self, requirements: str, database: DatabaseResult | None = None) -> str:
        self.logger.info("Designing API architecture")
        prompt = requirements
        if database is not None:
            prompt += f"\n\nDatabase (configured by the Database Agent): {database.database_type}"

        architecture = self._chat(prompt, max_tokens=3500, temperature=0.2)
        if self.context is not None:
            self.context.save_decision("backend", "architecture", {"requirements": requirements, "architecture": architecture})
            self.context.add_team_decision(
                "architecture",
                {"title": "Backend API architecture", "decided_by": self.display_name, "summary": architecture[:500]},
            )
        return architecture

    def generate_api_code(self, repo: str, feature: str, database: DatabaseResult | None = None) -> str:
        """Generate the API code for ``feature``; returns the raw response."""
        self.logger.info("Generating API code for %s", feature)
        request = f"Generate API code for {feature} in {repo}"
        if database is not None:
            request += f" using {database.database_type} via process.env.DATABASE_URL"

        code = self._chat(
            request,
            system_prompt=BACKEND_CODE_PROMPT.format(feature=feature),
            max_tokens=4500,
            temperature=0.2,
        )
        if self.context is not None:
            slug = re.sub(r"\s+", "-", feature.strip().lower())
            self.context.save_artifact("backend-code", slug, {"feature_name": feature, "repository": repo, "code": code})
        return code

    def extract_endpoints(self, code: str, requirements: str = "") -> list[Endpoint]:
        """Endpoints declared in ``code``, or the ones implied by ``requirements``.

        Example:
            >>> agent.extract_endpoints("app.get('/health', h); app.post(`/api/items`, c)")
            [Endpoint(method='GET', path='/health'), Endpoint(method='POST', path='/api/items')]
        """
        endpoints = [Endpoint(method=method.upper(), path=path) for method, path in ROUTE_PATTERN.findall(code or "")]
        return endpoints or feature_endpoints(requirements)

    def develop_complete_api(
        self,
        requirements: str,
        project_name: str,
        database: DatabaseResult | None = None,
    ) -> BackendResult:
        """Architecture, code, commit and PR for the backend repository."""
        architecture = self.create_api_architecture(requirements, database)
        code = self.generate_api_code(project_name, "Complete Backend API with Database", database)

        files = extract_files(code) or self._fallback_files(project_name, database)
        self.create_git_branch(project_name, BACKEND_BRANCH)
        commit_sha = self.commit_code(project_name, BACKEND_BRANCH, files, "Implement complete backend API")

        summary = architecture[:500]
        pr = self.create_pull_request(
            project_name,
            BACKEND_BRANCH,
            "Backend API: Complete Implementation",
            f"Backend API implementation completed.\n\n{summary}",
        )

        return BackendResult(
            architecture=architecture,
            endpoints=self.extract_endpoints(code, requirements),
            branch=BACKEND_BRANCH,
            commit_sha=commit_sha,
            files=sorted(files),
            pr_number=pr["number"],
            pr_url=pr["url"],
        )

    def _fallback_files(self, project_name: str, database: DatabaseResult | None) -> dict[str, str]:
        self.logger.warning("No file blocks in generated code, committing the base server")
        database_type = database.database_type if database else "MongoDB"
        return {
            "package.json": package_json(
                name=project_name,
                description=f"Backend API for {project_name}",
                extra_dependencies={"jsonwebtoken": "^9.0.2", **DATABASE_DRIVERS.get(database_type, {})},
            ),
            "server.js": server_js(app_name=project_name),
            "railway.json": railway_json(),
            "README.md": f"# {project_name} - Backend API\n\nDatabase: {database_type}. Deployed on Railway.\n",
        }
