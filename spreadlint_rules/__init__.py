"""
spreadlint rules package.

Rules are discovered by `spreadlint.registry.discover_rules(["spreadlint_rules"])`,
which imports every module here and registers the objects listed in its
module-level RULES list.

To add a new rule:
1. Create a module in this package named after the rule id
   (e.g. styles_only_spread_css.py for "styles.only_spread_css")
2. Define a class with `meta` (RuleMeta), `requires` (Requires) and
   `visit(ctx)` yielding Finding objects
3. Export it with `RULES = [MyRule()]`
"""
