"""Components, content and form backends for the portfolio site."""
