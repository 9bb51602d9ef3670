import logging
from typing import Optional

from .models import BasinModel, BasinRegion

logger = logging.getLogger(__name__)


class ModelSelector:
    """Resolves the basin model for a located region"""

    def select(self, region: BasinRegion, model_id: Optional[str] = None) -> BasinModel:
        """
        Pick the explicitly requested model, or the region default.

        Raises:
            UnknownModel: if model_id is given but matches no known model
        """
        if model_id is not None:
            model = BasinModel.from_id(model_id)
            logger.debug(f"Explicit basin model '{model.id}' requested for region '{region.id}'")
            return model

        return region.default_model
