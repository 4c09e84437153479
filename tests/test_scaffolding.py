"""Tests for application scaffolding and deployment templates."""

import json

import pytest

from schemas.phase_results import DesignSystem
from scaffolding import (
    analyze_app_description,
    database_connection_code,
    design_system_css,
    env_example,
    generate_project_name,
    generate_repository_structure,
    package_manifest,
    railway_json,
    render,
    server_js,
)


@pytest.mark.parametrize(
    "description, expected",
    [
        ("A fitness tracking app with workout logging", "fitness-tracking-with-app"),
        ("Build me a to-do list!", "build-todo-list-app"),
        ("A b c", "-app"),
        ("Café booking system", "booking-system-app"),
        ("Résumé builder tool", "rsum-builder-tool-app"),
    ],
)
def test_generate_project_name(description, expected):
    assert generate_project_name(description) == expected


class TestAnalyzeDescription:
    @pytest.mark.parametrize(
        "description, app_type",
        [
            ("A blog with CMS features", "blog_cms"),
            ("An ecommerce store for shoes", "ecommerce"),
            ("Team chat with channels", "realtime_chat"),
            ("Todo list for families", "task_management"),
            ("Workout planner", "fitness_tracker"),
            ("A recipe sharing site", "generic_webapp"),
        ],
    )
    def test_app_type(self, description, app_type):
        assert analyze_app_description(description).app_type == app_type

    def test_first_matching_type_wins(self):
        # mentions both a blog and a chat
        assert analyze_app_description("A blog with live chat").app_type == "blog_cms"

    def test_extra_features(self):
        analysis = analyze_app_description("Task tracker with Google login, email alerts and an admin dashboard")

        assert analysis.features[-4:] == ["Google OAuth", "Email Notifications", "Analytics Dashboard", "Admin Panel"]
        assert analysis.project_name == "task-tracker-with-app"


class TestRepositoryStructure:
    def test_base_files(self):
        structure = generate_repository_structure(analyze_app_description("A recipe sharing site"))

        assert {"package.json", "server.js", "railway.json", "README.md", "public/style.css"} <= set(structure)
        assert json.loads(structure["package.json"])["name"] == "recipe-sharing-site-app"
        assert "Recipe Sharing Site App" in structure["views/index.html"]

    def test_type_specific_files(self):
        structure = generate_repository_structure(analyze_app_description("An ecommerce store"))

        assert "models/Product.js" in structure
        assert "models/Order.js" in structure

    def test_design_system_files(self):
        design = DesignSystem(colors={"primary": "#3B82F6"}, spacing={"4": "1rem"})
        structure = generate_repository_structure(
            analyze_app_description("A recipe sharing site"),
            design_system=design,
            stylesheet=".btn { color: red; }\n",
        )

        assert "public/style.css" not in structure
        assert "--color-primary: #3B82F6;" in structure["public/styles/design-system.css"]
        assert structure["public/styles/main.css"] == ".btn { color: red; }\n"


def test_design_system_css_includes_fonts():
    design = DesignSystem(typography={"font_families": {"heading": "'Inter', sans-serif"}})

    css = design_system_css(design)

    assert css.startswith(":root {")
    assert "--font-heading: 'Inter', sans-serif;" in css


class TestTemplates:
    def test_render_leaves_unknown_braces(self):
        assert render("app.get('/', (req, res) => { res.send('{name}') })", {"name": "x"}) == (
            "app.get('/', (req, res) => { res.send('x') })"
        )

    def test_server_js_binds_port_from_env(self):
        code = server_js(app_name="Shop")

        assert "process.env.PORT" in code
        assert "{app_name}" not in code
        assert "/health" in code

    def test_dynamic_port_server(self):
        assert "EADDRINUSE" in server_js(dynamic_port=True)

    def test_package_manifest_merges_dependencies(self):
        manifest = package_manifest(extra_dependencies={"pg": "^8.11.3"}, extra_scripts={"build": "tsc"})

        assert manifest["dependencies"]["express"] == "^4.18.2"
        assert manifest["dependencies"]["pg"] == "^8.11.3"
        assert manifest["scripts"]["start"] == "node server.js"
        assert manifest["scripts"]["build"] == "tsc"

    def test_railway_json(self):
        config = json.loads(railway_json(build_command="npm run build"))

        assert config["build"] == {"builder": "NIXPACKS", "buildCommand": "npm run build"}
        assert config["deploy"]["healthcheckPath"] == "/health"
        assert "buildCommand" not in json.loads(railway_json())["build"]

    def test_connection_code_falls_back_to_mongodb(self):
        assert database_connection_code("CouchDB") == database_connection_code("MongoDB")
        assert "require('pg')" in database_connection_code("PostgreSQL")

    def test_env_example(self):
        content = env_example("shop-api", "PostgreSQL")

        assert "# shop-api environment" in content
        assert "postgresql://" in content
        assert "DATABASE_URL=" in content
