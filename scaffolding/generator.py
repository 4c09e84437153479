"""Application scaffolding from a free-form description.

``analyze_app_description`` types the application by keyword and
``generate_repository_structure`` turns the analysis into a path -> content
map ready to be committed.
"""

import re

from schemas.phase_results import AppAnalysis, DesignSystem

from .templates import (
    database_connection_code,
    env_example,
    package_json,
    railway_json,
    server_js,
)

# (app_type, keywords, features, complexity, estimated_time), first match wins
APP_TYPES: list[tuple[str, tuple[str, ...], list[str], str, str]] = [
    ("blog_cms", ("blog", "cms"), ["Authentication", "Content Management", "SEO Optimization"], "medium", "10-15 minutes"),
    ("ecommerce", ("e-commerce", "ecommerce"), ["Payment Integration", "Product Catalog", "Order Management", "User Authentication"], "high", "20-25 minutes"),
    ("realtime_chat", ("chat", "messaging"), ["Real-time Messaging", "User Authentication", "File Sharing", "Group Chat"], "medium", "15-20 minutes"),
    ("task_management", ("task", "todo"), ["Task Creation", "Project Management", "User Authentication", "Notifications"], "medium", "10-15 minutes"),
    ("fitness_tracker", ("fitness", "sport", "workout"), ["Exercise Tracking", "Progress Analytics", "User Profiles", "Goal Setting"], "medium", "15-20 minutes"),
]

GENERIC_APP = ("generic_webapp", (), ["User Authentication", "CRUD Operations", "Responsive Design"], "medium", "10-15 minutes")

# keyword(s) -> extra feature
EXTRA_FEATURES: list[tuple[tuple[str, ...], str]] = [
    (("login", "google"), "Google OAuth"),
    (("email",), "Email Notifications"),
    (("dashboard",), "Analytics Dashboard"),
    (("admin", "panel"), "Admin Panel"),
]


def generate_project_name(description: str) -> str:
    """Derive a repository name from a description.

    Lowercase, strip everything but ASCII letters, digits and underscores,
    keep words longer than three characters, take the first three and
    append ``-app``. Accented letters are dropped.

    Example:
        >>> generate_project_name("A fitness tracking app with workout logging")
        'fitness-tracking-with-app'
    """
    cleaned = re.sub(r"[^\w\s]", "", description.lower(), flags=re.ASCII)
    words = [w for w in cleaned.split() if len(w) > 3][:3]
    return "-".join(words) + "-app"


def analyze_app_description(description: str) -> AppAnalysis:
    """Classify an application description by keyword."""
    text = description.lower()

    app_type, _, features, complexity, estimated_time = next(
        (entry for entry in APP_TYPES if any(k in text for k in entry[1])),
        GENERIC_APP,
    )
    features = list(features)
    for keywords, feature in EXTRA_FEATURES:
        if any(k in text for k in keywords):
            features.append(feature)

    return AppAnalysis(
        description=description,
        app_type=app_type,
        features=features,
        complexity=complexity,
        estimated_time=estimated_time,
        project_name=generate_project_name(description),
    )


def generate_repository_structure(
    analysis: AppAnalysis,
    design_system: DesignSystem | None = None,
    stylesheet: str | None = None,
) -> dict[str, str]:
    """Build the file map for a generated Express application.

    Args:
        analysis: Result of ``analyze_app_description``
        design_system: Optional design tokens; adds design-system CSS
        stylesheet: Optional stylesheet from the CSS specialist

    Returns:
        Path -> file content
    """
    name = analysis.project_name or "ai-team-app"
    title = name.replace("-", " ").title()

    structure = {
        "package.json": package_json(
            name=name,
            description=analysis.description[:120],
            extra_dependencies={"jsonwebtoken": "^9.0.2"},
        ),
        "server.js": server_js(app_name=title),
        "railway.json": railway_json(),
        "README.md": _readme(title, analysis),
        ".env.example": env_example(name),
        "database/connection.js": database_connection_code("MongoDB"),
        "routes/api.js": API_ROUTES,
        "models/User.js": USER_MODEL,
        "middleware/auth.js": AUTH_MIDDLEWARE,
        "views/index.html": _index_html(title, analysis),
        "public/script.js": FRONTEND_JS,
    }

    if design_system is not None:
        structure["public/styles/design-system.css"] = design_system_css(design_system)
        structure["public/styles/main.css"] = stylesheet or BASE_CSS
    else:
        structure["public/style.css"] = stylesheet or BASE_CSS

    structure.update(TYPE_SPECIFIC_FILES.get(analysis.app_type, {}))
    return structure


def design_system_css(design_system: DesignSystem) -> str:
    """Render design tokens as CSS custom properties."""
    groups = [
        ("color", design_system.colors),
        ("space", design_system.spacing),
        ("radius", design_system.border_radius),
        ("shadow", design_system.shadows),
        ("transition", design_system.transitions),
    ]
    lines = [":root {"]
    for prefix, tokens in groups:
        for key, value in tokens.items():
            lines.append(f"  --{prefix}-{key}: {value};")
    for key, value in design_system.typography.get("font_families", {}).items():
        lines.append(f"  --font-{key}: {value};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def _readme(title: str, analysis: AppAnalysis) -> str:
    features = "\n".join(f"- {f}" for f in analysis.features)
    return f"""# {title}

{analysis.description}

## Features

{features}

## Run

```bash
npm install
npm start
```

Deployed on Railway (see `railway.json`); health check at `/health`.
"""


def _index_html(title: str, analysis: AppAnalysis) -> str:
    items = "\n".join(f"        <li>{f}</li>" for f in analysis.features)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  <link rel="stylesheet" href="/style.css">
</head>
<body>
  <main class="container">
    <h1>{title}</h1>
    <section>
      <ul>
{items}
      </ul>
    </section>
    <div id="status"></div>
  </main>
  <script src="/script.js"></script>
</body>
</html>
"""


API_ROUTES = """const express = require('express');
const auth = require('../middleware/auth');
const User = require('../models/User');

const router = express.Router();

router.post('/auth/register', async (req, res) => {
  const user = await User.create(req.body);
  res.status(201).json({ id: user._id });
});

router.get('/me', auth, async (req, res) => {
  res.json(await User.findById(req.user.id).select('-password'));
});

module.exports = router;
"""

USER_MODEL = """const mongoose = require('mongoose');

const userSchema = new mongoose.Schema({
  email: { type: String, required: true, unique: true },
  password: { type: String, required: true },
  name: String
}, { timestamps: true });

module.exports = mongoose.model('User', userSchema);
"""

AUTH_MIDDLEWARE = """const jwt = require('jsonwebtoken');

module.exports = (req, res, next) => {
  const token = (req.headers.authorization || '').replace('Bearer ', '');
  if (!token) return res.status(401).json({ error: 'Authentication required' });
  try {
    req.user = jwt.verify(token, process.env.JWT_SECRET);
    next();
  } catch (error) {
    res.status(401).json({ error: 'Invalid token' });
  }
};
"""

FRONTEND_JS = """document.addEventListener('DOMContentLoaded', async () => {
  const status = document.getElementById('status');
  try {
    const response = await fetch('/health');
    const health = await response.json();
    status.textContent = `API ${health.status}`;
  } catch (error) {
    status.textContent = 'API unavailable';
  }
});
"""

BASE_CSS = """* { box-sizing: border-box; }
body { margin: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; color: #111827; }
.container { max-width: 960px; margin: 0 auto; padding: 2rem 1rem; }
"""

TYPE_SPECIFIC_FILES: dict[str, dict[str, str]] = {
    "ecommerce": {
        "models/Product.js": """const mongoose = require('mongoose');

module.exports = mongoose.model('Product', new mongoose.Schema({
  name: { type: String, required: true },
  price: { type: Number, required: true },
  stock: { type: Number, default: 0 }
}, { timestamps: true }));
""",
        "models/Order.js": """const mongoose = require('mongoose');

module.exports = mongoose.model('Order', new mongoose.Schema({
  user: { type: mongoose.Schema.Types.ObjectId, ref: 'User' },
  items: [{ product: { type: mongoose.Schema.Types.ObjectId, ref: 'Product' }, quantity: Number }],
  status: { type: String, default: 'pending' }
}, { timestamps: true }));
""",
    },
    "realtime_chat": {
        "socket/chatHandler.js": """module.exports = (io) => {
  io.on('connection', (socket) => {
    socket.on('join', (room) => socket.join(room));
    socket.on('message', ({ room, text }) => io.to(room).emit('message', { text, at: Date.now() }));
  });
};
""",
    },
    "blog_cms": {
        "models/Post.js": """const mongoose = require('mongoose');

module.exports = mongoose.model('Post', new mongoose.Schema({
  title: { type: String, required: true },
  slug: { type: String, unique: true },
  body: String,
  published: { type: Boolean, default: false }
}, { timestamps: true }));
""",
    },
}
