"""
Function type visibility filtering for call nodes.
"""

from ..core.types import CallNode, FUNCTION_TYPE_INTERNAL, FUNCTION_TYPE_METHOD


class FunctionTypeFilter:
    """Applies the user/internal/method visibility toggles."""
    
    def __init__(self, config):
        """
        Initialize with graph configuration.
        
        Args:
            config: GraphConfig instance
        """
        self.config = config
    
    def should_include_type(self, function_type: int) -> bool:
        """
        Determine if a function type is visible under the current toggles.
        
        Args:
            function_type: 0 user, 1 internal, 2 method, anything else unknown
            
        Returns:
            True if nodes of this type should be grouped
        """
        if function_type == FUNCTION_TYPE_INTERNAL:
            return self.config.show_internal_functions
        if function_type == FUNCTION_TYPE_METHOD:
            return self.config.show_methods
        # Unclassified calls are treated as user code
        return self.config.show_user_functions
    
    def should_include_node(self, node: CallNode) -> bool:
        return self.should_include_type(node.function_type)
