# Released under Gnu GPL v2.0, see LICENSE file for details
"""Handling of conversation nodes"""


class TreeNode(object):
    """
    Base class for conversation steps.

    :ivar child: the step to execute after this one, None for the last one
    :ivar phase: phase of the probe the node belongs to, see
        :py:class:`~bleedcheck.constants.ProbePhase`
    """

    phase = None

    def __init__(self):
        """Prepare internode dependencies"""
        self.child = None

    def add_child(self, child):
        """
        Sets the parameter as the child of the node

        :return: the child node
        """
        self.child = child
        return self.child

    def walk(self):
        """
        Return iterator with the node and all its descendants

        :rtype: iterator
        """
        node = self
        while node is not None:
            yield node
            node = node.child

    def is_command(self):
        """
        Checks if the object is a standalone state modifier

        :rtype: bool
        """
        raise NotImplementedError("Subclasses need to implement this!")

    def is_expect(self):
        """
        Checks if the object is a node which reads messages

        :rtype: bool
        """
        raise NotImplementedError("Subclasses need to implement this!")

    def is_generator(self):
        """
        Checks if the object is a generator for messages to send

        :rtype: bool
        """
        raise NotImplementedError("Subclasses need to implement this!")

    def _repr(self, attributes):
        """
        Return a text representation of the object.

        :param list(str) attributes: names of attributes of the object that
            will be included in the text representation
        """
        return "{0}({1})".format(
            self.__class__.__name__,
            ", ".join("{0}={1!r}".format(name, getattr(self, name)) for name
                      in attributes if getattr(self, name) is not None))
