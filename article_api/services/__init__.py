# Services package.
#
#   article_service  — validated create/update/delete, lookups and listings
#                      for Article, with a Redis read-through cache
#
# All service functions accept an AsyncSession as their first argument.
# Persistence rules (ordering, pagination, slug uniqueness, per-call
# transactions) live one level down in ``article_api.store``.
