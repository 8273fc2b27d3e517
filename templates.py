# templates.py
from jinja2 import DictLoader, Environment, select_autoescape

BOOTSTRAP_CSS = "https://cdnjs.cloudflare.com/ajax/libs/bootstrap/5.3.0/css/bootstrap.min.css"
BOOTSTRAP_JS = "https://cdnjs.cloudflare.com/ajax/libs/bootstrap/5.3.0/js/bootstrap.bundle.min.js"
FAVICON = "https://th.bing.com/th/id/OIG1.zckrRMeI76ehRbucAgma?dpr=2&pid=ImgDetMain"

BASE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{% block title %}{{ site_name }}{% endblock %}</title>
    {% block meta %}{% endblock %}
    <link rel="icon" href="{{ favicon }}" type="image/x-icon">
    <link rel="stylesheet" href="{{ bootstrap_css }}">
    <style>
        body { background-color: #121212; color: #fff; }
        .anime-thumbnail { max-height: 230px; object-fit: cover; border-radius: 10px; }
        .card { background-color: #1e1e1e; color: #fff; }
        .ratio iframe, video { border-radius: 10px; }
    </style>
</head>
<body>
    <div class="container mt-5">
        {% block content %}{% endblock %}
    </div>
    {% block scripts %}{% endblock %}
    <script src="{{ bootstrap_js }}"></script>
</body>
</html>
"""

HOME_TEMPLATE = """{% extends "base.html" %}
{% block title %}{{ site_name }} - Home{% endblock %}
{% block content %}
<h1 class="text-center">{{ site_name }}</h1>
<form class="d-flex justify-content-center mb-4" action="/" method="get">
    <input class="form-control me-2" type="search" name="search" placeholder="Search Anime" aria-label="Search" value="{{ view.search }}">
    <button class="btn btn-outline-success" type="submit">Search</button>
</form>
{% if not view.cards %}
<p class="text-center text-muted empty-listing">No anime found.</p>
{% endif %}
<div class="row">
    {% for card in view.cards %}
    <div class="col-md-4 col-lg-3">
        <div class="card mb-4 anime-card{% if card.degraded %} degraded{% endif %}">
            <a href="{{ card.href }}" style="text-decoration: none;">
                {% if card.thumb %}<img src="{{ card.thumb }}" class="card-img-top anime-thumbnail" alt="{{ card.title }}">{% endif %}
                <div class="card-body">
                    <h5 class="card-title">{{ card.title }}</h5>
                    {% for line in card.lines %}
                    <p class="card-text">{{ line }}</p>
                    {% endfor %}
                </div>
            </a>
        </div>
    </div>
    {% endfor %}
</div>
<nav aria-label="Page navigation">
    <ul class="pagination justify-content-center">
        {% for link in view.pages %}
        <li class="page-item{% if link.active %} active{% endif %}{% if link.disabled %} disabled{% endif %}">
            <a class="page-link bg-dark text-light" href="{{ link.href }}">{{ link.label }}</a>
        </li>
        {% endfor %}
    </ul>
</nav>
{% endblock %}
"""

DETAIL_TEMPLATE = """{% extends "base.html" %}
{% block title %}{{ view.info.title }} | {{ site_name }}{% endblock %}
{% block meta %}
<meta name="description" content="{{ view.info.sinopsis }}">
<meta name="keywords" content="{{ view.info.title }}, streaming anime, streaming donghua, nonton anime, nonton donghua">
{% endblock %}
{% block content %}
<h1>{{ view.info.title }}</h1>
<a href="/" class="btn btn-outline-light mb-4">Home</a>
<div class="row">
    <div class="col-md-4">
        {% if view.info.thumb %}<img src="{{ view.info.thumb }}" class="img-fluid" alt="{{ view.info.title }}">{% endif %}
    </div>
    <div class="col-md-8">
        <p>{{ view.info.sinopsis }}</p>
        <h3>Details</h3>
        <ul class="anime-details">
            {% for line in view.info.detail %}<li>{{ line }}</li>{% endfor %}
        </ul>
        <h3>Genres</h3>
        <ul class="anime-genres">
            {% for genre in view.info.genres %}<li>{{ genre }}</li>{% endfor %}
        </ul>
        <h3>Episodes</h3>
        <ul class="list-group episode-list">
            {% for episode in view.episodes %}
            <li class="list-group-item bg-dark">
                <a href="{{ episode.href }}" class="text-light">{{ episode.title }}</a>
                {% if episode.date %}<span class="text-muted"> - {{ episode.date }}</span>{% endif %}
            </li>
            {% endfor %}
        </ul>
    </div>
</div>
{% endblock %}
"""

STREAM_TEMPLATE = """{% extends "base.html" %}
{% block title %}{{ view.title }} - Episode {{ view.number }} | {{ site_name }}{% endblock %}
{% block meta %}
<meta name="description" content="Tonton {{ view.title }} episode {{ view.number }} di {{ site_name }}, situs streaming anime dan donghua terbaik.">
<meta name="keywords" content="{{ view.title }}, streaming anime, streaming donghua, nonton anime, nonton donghua">
{% endblock %}
{% block content %}
<h1>{{ view.title }}</h1>
<div class="d-flex gap-2 mb-3">
    <a href="/" class="btn btn-outline-light">Home</a>
    <a href="{{ view.detail_href }}" class="btn btn-outline-light">Details</a>
</div>
{% if view.servers %}
<form method="get" class="mb-3">
    <select name="server" class="form-select bg-dark text-light" onchange="this.form.submit()">
        <option value="">Default</option>
        {% for server in view.servers %}
        <option value="{{ server.name }}"{% if server.selected %} selected{% endif %}>{{ server.name }}</option>
        {% endfor %}
    </select>
</form>
{% endif %}
<div class="ratio ratio-16x9 mb-3">
    <iframe id="player" src="{{ view.player_url or '' }}" frameborder="0" allowfullscreen></iframe>
</div>
{% include "episode_nav.html" %}
<div class="list-group mt-4 episode-list">
    {% for episode in view.episodes %}
    <a href="{{ episode.href }}" class="list-group-item list-group-item-action{% if episode.active %} active{% endif %}">{{ episode.title }}</a>
    {% endfor %}
</div>
<div class="mt-4">
    <h3>Synopsis</h3>
    <p>{{ view.sinopsis }}</p>
</div>
{% endblock %}
"""

STORE_STREAM_TEMPLATE = """{% extends "base.html" %}
{% block title %}{{ view.title }} - Episode {{ view.number }}{% endblock %}
{% block content %}
<h1>{{ view.title }} - Episode {{ view.number }}</h1>
<div class="mb-4">
    <video id="player" src="{{ view.player_url or '#' }}" controls class="w-100"></video>
</div>
{% include "episode_nav.html" %}
<div class="mt-4">
    <label for="goToEpisode">Go to Episode:</label>
    <input type="number" id="goToEpisode" class="form-control w-25 d-inline" min="1" max="{{ view.total }}" value="{{ view.number }}">
    <button onclick="goToEpisode()" class="btn btn-outline-light">Go</button>
</div>
{% endblock %}
{% block scripts %}
<script>
    function goToEpisode() {
        const episode = document.getElementById('goToEpisode').value;
        window.location.href = {{ view.jump_href_prefix | tojson }} + episode;
    }
</script>
{% endblock %}
"""

EPISODE_NAV_TEMPLATE = """<div class="d-flex justify-content-between episode-nav">
    <a href="{{ view.previous.href }}" class="btn btn-outline-light prev-episode{% if view.previous.disabled %} disabled{% endif %}">Previous Episode</a>
    <a href="{{ view.next.href }}" class="btn btn-outline-light next-episode{% if view.next.disabled %} disabled{% endif %}">Next Episode</a>
</div>
"""

ADMIN_TEMPLATE = """{% extends "base.html" %}
{% block title %}Admin - {{ site_name }}{% endblock %}
{% block content %}
<h1 class="text-center">Admin - {{ site_name }}</h1>
<form action="/admin/add-anime" method="POST" class="mb-5">
    <h2>Add Anime</h2>
    {% for field in ['title', 'synopsis', 'thumbnail', 'genre', 'animeId'] %}
    <div class="mb-3">
        <label for="anime-{{ field }}" class="form-label">{{ field }}</label>
        {% if field == 'synopsis' %}
        <textarea class="form-control" id="anime-{{ field }}" name="{{ field }}" rows="3" required></textarea>
        {% else %}
        <input type="text" class="form-control" id="anime-{{ field }}" name="{{ field }}" required>
        {% endif %}
    </div>
    {% endfor %}
    <button type="submit" class="btn btn-primary">Add Anime</button>
</form>
<form action="/admin/add-episode" method="POST">
    <h2>Add Episode</h2>
    <div class="mb-3">
        <label for="episode-animeId" class="form-label">Anime ID</label>
        <input type="text" class="form-control" id="episode-animeId" name="animeId" required>
    </div>
    <div class="mb-3">
        <label for="episode-number" class="form-label">Episode Number</label>
        <input type="number" class="form-control" id="episode-number" name="episode" required>
    </div>
    <div class="mb-3">
        <label for="episode-link" class="form-label">Video Link</label>
        <input type="text" class="form-control" id="episode-link" name="link" required>
    </div>
    <button type="submit" class="btn btn-primary">Add Episode</button>
</form>
{% endblock %}
"""

TEMPLATES = {
    'base.html': BASE_TEMPLATE,
    'home.html': HOME_TEMPLATE,
    'detail.html': DETAIL_TEMPLATE,
    'stream.html': STREAM_TEMPLATE,
    'store_stream.html': STORE_STREAM_TEMPLATE,
    'episode_nav.html': EPISODE_NAV_TEMPLATE,
    'admin.html': ADMIN_TEMPLATE,
}

environment = Environment(
    loader=DictLoader(TEMPLATES),
    autoescape=select_autoescape(default=True, default_for_string=True),
)
environment.globals.update(
    bootstrap_css=BOOTSTRAP_CSS,
    bootstrap_js=BOOTSTRAP_JS,
    favicon=FAVICON,
)
