# Import all the models, so that Base has them before metadata.create_all
from aadsso.db.base_class import Base  # noqa

from aadsso.models.site_option import SiteOption  # noqa
