"""HTML fixtures shared by the test modules."""

RICH_PAGE = """<!doctype html>
<html lang="en">
<head>
  <title>Acme Ledger | Bookkeeping software for small teams</title>
  <meta name="description" content="Acme Ledger is bookkeeping software that reconciles your bank feeds automatically.">
  <meta property="og:site_name" content="Acme Ledger">
  <meta name="author" content="Acme Ledger Team">
  <meta property="article:modified_time" content="2026-09-01T10:00:00Z">
  <link rel="canonical" href="https://acme.example.com/">
  <link rel="sitemap" type="application/xml" href="/sitemap.xml">
  <script type="application/ld+json">
  {"@context": "https://schema.org", "@graph": [
    {"@type": "Organization", "name": "Acme Ledger", "url": "https://acme.example.com"},
    {"@type": "FAQPage", "mainEntity": [{"@type": "Question", "name": "What is Acme Ledger?"}]},
    {"@type": "Product", "name": "Acme Ledger Pro",
     "offers": {"@type": "Offer", "price": "29", "priceCurrency": "USD"}}
  ]}
  </script>
</head>
<body>
  <header>
    <nav>
      <a href="/pricing">Pricing</a>
      <a href="/about">About us</a>
      <a href="/contact">Contact</a>
      <a href="/help/getting-started">Help center</a>
    </nav>
  </header>
  <main>
    <h1>Bookkeeping software that reconciles itself</h1>
    <p>Acme Ledger is a bookkeeping tool for small teams that want accurate books without spreadsheets.
       It connects to your bank, categorizes every transaction and prepares reports for your accountant.</p>
    <h2>How it works</h2>
    <ol>
      <li>Connect your bank accounts in a few clicks.</li>
      <li>Review the transactions Acme Ledger categorized for you.</li>
      <li>Share a clean ledger with your accountant at month end.</li>
    </ol>
    <h2>Plans and pricing</h2>
    <p>The Starter plan is free forever. Pro costs $29 per month with a 14-day free trial and no card required.</p>
    <h2>Frequently asked questions</h2>
    <div id="faq">
      <h3>Can I import data from another tool?</h3>
      <p>Yes. Acme Ledger imports CSV exports and connects directly to the most common accounting tools used by
         small businesses, so moving your history over takes minutes rather than days.</p>
      <h3>Is my data secure?</h3>
      <p>All data is encrypted in transit and at rest, access is logged, and you can export or delete your data at
         any time from the settings page without contacting support.</p>
    </div>
    <h2>What customers say</h2>
    <article>
      <p>Independent reviews from <a href="https://www.reviewsite.org/acme">Review Site</a> and
         <a href="https://news.example.net/story">Example News</a> rate Acme Ledger highly for small teams.</p>
      <blockquote cite="https://news.example.net/story">The simplest ledger we tested this year.</blockquote>
    </article>
    <p>Questions about your account, billing or migration can go to hello@acme.example.com and our team answers
       within one business day. We are a remote company with people in several time zones, and we publish our
       product changelog every month so customers can see exactly what changed and why it matters to them.</p>
  </main>
  <footer>
    <a href="mailto:hello@acme.example.com">Email us</a>
    <p>Published by Acme Ledger Inc. Last updated <time datetime="2026-09-01">September 2026</time>.</p>
  </footer>
</body>
</html>
"""

JS_SHELL_PAGE = """<!doctype html>
<html>
<head>
  <title>App</title>
  <script src="/static/bundle.js"></script>
</head>
<body>
  <div id="root"></div>
  <noscript>You need to enable JavaScript to run this app.</noscript>
</body>
</html>
"""

NOINDEX_PAGE = """<!doctype html>
<html>
<head>
  <title>Staging</title>
  <meta name="robots" content="noindex, nofollow">
</head>
<body><h1>Home</h1><p>Coming soon.</p></body>
</html>
"""

BROKEN_JSONLD_PAGE = """<!doctype html>
<html>
<head>
  <title>Broken schema</title>
  <script type="application/ld+json">{"@type": "Organization", "name": "Broken",</script>
</head>
<body><h1>Welcome</h1></body>
</html>
"""

ROBOTS_BLOCKING_GPTBOT = """User-agent: GPTBot
Disallow: /

User-agent: *
Allow: /

Sitemap: https://acme.example.com/sitemap.xml
"""

ROBOTS_ALLOW_ALL = """User-agent: *
Disallow: /admin
"""

DEEP_JSONLD_PAGE = (
    "<!doctype html><html><head><title>Bad Co | Nested markup</title>"
    '<script type="application/ld+json">' + "[" * 5000 + "]" * 5000 + "</script>"
    "</head><body><h1>Bad Co sells nested things</h1></body></html>"
)

DEEP_ORGANIZATION_PAGE = (
    "<!doctype html><html><head><title>Deep Co</title>"
    '<script type="application/ld+json">'
    + '{"a": ' * 400
    + '{"@type": "Organization", "name": "Deep Co"}'
    + "}" * 400
    + "</script></head><body><h1>Deep Co</h1></body></html>"
)
