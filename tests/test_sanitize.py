from browser_pilot.sanitize import sanitize_html

PAGE = """
<html>
  <head><title>Shop</title><style>body { color: red; }</style></head>
  <body class="main" onload="init()">
    <header><h1>Logo</h1></header>
    <nav><a href="/home">Home</a><script>track()</script></nav>
    <main>
      <form id="search" class="search-form" data-track="1">
        <input name="q" aria-label="Search" style="width: 10px" type="text">
        <img src="/a.png" alt="A picture" width="10">
      </form>
      <a href="/cart" title="Cart" jsname="cart" class="link">Cart</a>
    </main>
    <aside>Ads</aside>
    <footer>Copyright</footer>
    <script>alert(1)</script>
  </body>
</html>
"""


def test_removes_non_essential_elements():
    result = sanitize_html(PAGE)
    for text in ("Logo", "Home", "track()", "alert(1)", "Ads", "Copyright", "color: red"):
        assert text not in result


def test_keeps_allow_listed_attributes_only():
    result = sanitize_html(PAGE)
    assert 'id="search"' in result
    assert 'name="q"' in result
    assert 'aria-label="Search"' in result
    assert 'src="/a.png"' in result
    assert 'alt="A picture"' in result
    assert 'href="/cart"' in result
    assert 'title="Cart"' in result
    assert 'jsname="cart"' in result
    for attribute in ("class=", "onload=", "style=", "data-track=", "type=", "width="):
        assert attribute not in result


def test_output_is_pretty_printed():
    result = sanitize_html("<div><p>Hello</p></div>")
    assert result.splitlines()[:3] == ["<div>", " <p>", "  Hello"]


def test_empty_markup():
    assert sanitize_html("") == ""
