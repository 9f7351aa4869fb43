"""Templates embedded as strings, rendered with ``render_page``."""
from flask import render_template_string

BASE_HTML = """
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{{ title or 'Book Library' }}</title>
  <style>
    body{font-family: Arial, Helvetica, sans-serif; margin: 20px}
    nav{background:#f2f2f2;padding:10px;margin-bottom:20px}
    nav a, nav form{margin-right:12px}
    nav form{display:inline}
    table{border-collapse:collapse; width:100%; margin-bottom:20px}
    th,td{border:1px solid #ddd;padding:8px;vertical-align:top}
    th{background:#f4f4f4}
    form.inline{display:inline}
    .flash{padding:8px;margin-bottom:10px;border:1px solid #ccc}
    .flash-success{background:#e6ffed;border-color:#34d058}
    .flash-error{background:#ffeef0;border-color:#d73a49}
    .flash-info{background:#f1f8ff;border-color:#0366d6}
    .error{color:#d73a49}
    img.cover{max-width:120px}
  </style>
</head>
<body>
  <nav>
    <a href="{{ url_for('books.books_list') }}">Books</a>
    {% if current_user.is_authenticated %}
      <a href="{{ url_for('books.book_create') }}">Add book</a>
      <span>Signed in as {{ current_user.username }}</span>
      <form method="post" action="{{ url_for('auth.logout') }}">
        <input type="hidden" name="csrf_token" value="{{ csrf_token() }}">
        <button type="submit">Log out</button>
      </form>
    {% else %}
      <a href="{{ url_for('auth.login') }}">Log in</a>
    {% endif %}
  </nav>
  {% with messages = get_flashed_messages(with_categories=true) %}
    {% for category, message in messages %}
      <div class="flash flash-{{ category }}">{{ message }}</div>
    {% endfor %}
  {% endwith %}
  {{ body|safe }}
</body>
</html>
"""

BOOK_ROWS = """
<table>
  <thead>
    <tr><th>#</th><th>Cover</th><th>Title</th><th>Author</th><th>Category</th><th>Quantity</th><th>Actions</th></tr>
  </thead>
  <tbody>
  {% for b in rows %}
    <tr>
      <td>{{ loop.index }}</td>
      <td>{% if b.cover_path %}<img class="cover" src="{{ url_for('books.media', key=b.cover_path) }}" alt="cover">{% endif %}</td>
      <td><a href="{{ url_for('books.book_detail', book_id=b.id) }}">{{ b.title }}</a></td>
      <td>{{ b.author }}</td>
      <td>{{ b.category.name if b.category else '' }}</td>
      <td>{{ b.quantity }}</td>
      <td>
        <a href="{{ url_for('books.book_pdf', book_id=b.id) }}">PDF</a>
        <a href="{{ url_for('books.book_edit', book_id=b.id) }}">Edit</a>
        <a href="{{ url_for('books.book_delete', book_id=b.id) }}">Delete</a>
      </td>
    </tr>
  {% else %}
    <tr><td colspan="7">No books yet.</td></tr>
  {% endfor %}
  </tbody>
</table>
"""

BOOKS_LIST_TEMPLATE = """
<h1>Books</h1>
<p><a href="{{ url_for('books.book_create') }}">Add a new book</a></p>
<h2>All books ({{ books|length }})</h2>
{% with rows = books %}""" + BOOK_ROWS + """{% endwith %}
<h2>My books ({{ user_books|length }})</h2>
{% with rows = user_books %}""" + BOOK_ROWS + """{% endwith %}
"""

BOOK_DETAILS_TEMPLATE = """
<h1>{{ book.title }}</h1>
{% if book.cover_path %}
  <img class="cover" src="{{ url_for('books.media', key=book.cover_path) }}" alt="cover">
{% endif %}
<table>
  <tr><th>Author</th><td>{{ book.author }}</td></tr>
  <tr><th>Category</th><td>{{ book.category.name if book.category else '' }}</td></tr>
  <tr><th>Quantity</th><td>{{ book.quantity }}</td></tr>
  <tr><th>Description</th><td>{{ book.description|safe }}</td></tr>
  <tr><th>Added by</th><td>{{ book.owner.username if book.owner else '' }}</td></tr>
</table>
<p>
  <a href="{{ url_for('books.book_pdf', book_id=book.id) }}">Read PDF</a> |
  <a href="{{ url_for('books.book_edit', book_id=book.id) }}">Edit</a> |
  <a href="{{ url_for('books.book_delete', book_id=book.id) }}">Delete</a> |
  <a href="{{ url_for('books.books_list') }}">Back to list</a>
</p>
"""

BOOK_FORM_TEMPLATE = """
<h1>{{ heading }}</h1>
<form method="post" enctype="multipart/form-data" action="{{ action }}">
  {{ form.hidden_tag() }}
  {% for field in [form.title, form.author, form.description, form.category_id, form.quantity, form.file_path, form.cover_path] %}
    <p>
      {{ field.label }}<br>
      {{ field() }}
      {% if field.name in ('file_path', 'cover_path') and book %}
        <br><small>Leave empty to keep the current file.</small>
      {% endif %}
      {% for error in field.errors %}
        <br><span class="error">{{ error }}</span>
      {% endfor %}
    </p>
  {% endfor %}
  {{ form.submit() }} {{ form.cancel() }}
</form>
"""

CONFIRM_DELETE_TEMPLATE = """
<h1>Delete book</h1>
<p>Are you sure you want to delete "{{ book.title }}"? Its PDF and cover will be removed too.</p>
<form method="post" action="{{ url_for('books.book_delete', book_id=book.id) }}">
  {{ form.hidden_tag() }}
  <button type="submit" name="confirm" value="yes">Yes, delete</button>
  <a href="{{ url_for('books.books_list') }}">Cancel</a>
</form>
"""

LOGIN_TEMPLATE = """
<h1>Log in</h1>
<form method="post" action="{{ url_for('auth.login', next=next_url) }}">
  {{ form.hidden_tag() }}
  {% for field in [form.username, form.password] %}
    <p>
      {{ field.label }}<br>
      {{ field() }}
      {% for error in field.errors %}<br><span class="error">{{ error }}</span>{% endfor %}
    </p>
  {% endfor %}
  {{ form.submit() }}
</form>
"""

ERROR_TEMPLATE = """
<h1>{{ code }} {{ name }}</h1>
<p>{{ description }}</p>
<p><a href="{{ url_for('books.books_list') }}">Back to the book list</a></p>
"""


def render_page(body_template, title=None, **context):
    body = render_template_string(body_template, **context)
    return render_template_string(BASE_HTML, body=body, title=title)
