from .resource_mapper import ResourceDataMapper, tags_to_dict

__all__ = ["ResourceDataMapper", "tags_to_dict"]
