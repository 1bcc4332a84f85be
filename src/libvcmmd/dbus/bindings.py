"""
Low-level cffi bindings for libdbus.

This module provides Python access to the reference D-Bus client library
(libdbus-1) through cffi. Only the small subset of the API needed to issue
method calls and walk their replies is declared here.

The bindings are structured around libdbus's object hierarchy:
- DBusConnection: A (shared) connection to the system or session bus
- DBusMessage: A method call or its reply
- DBusMessageIter: A cursor for appending or reading message arguments
"""

import threading

from cffi import FFI

from .constants import LIBDBUS_NAME

# Create the FFI instance that we'll use throughout
ffi = FFI()

# These declarations come from the libdbus headers:
# - /usr/include/dbus-1.0/dbus/dbus-bus.h
# - /usr/include/dbus-1.0/dbus/dbus-connection.h
# - /usr/include/dbus-1.0/dbus/dbus-message.h
ffi.cdef("""
    // libdbus uses a 32-bit integer for booleans
    typedef uint32_t dbus_bool_t;

    // Opaque handles, we only ever hold pointers to these
    typedef struct DBusConnection DBusConnection;
    typedef struct DBusMessage DBusMessage;
    typedef struct DBusError DBusError;

    typedef enum {
        DBUS_BUS_SESSION,
        DBUS_BUS_SYSTEM,
        DBUS_BUS_STARTER
    } DBusBusType;

    // Message iterator. The fields are private to libdbus but the struct
    // must be allocated by the caller, so its layout has to match exactly.
    typedef struct DBusMessageIter {
        void *dummy1;
        void *dummy2;
        uint32_t dummy3;
        int dummy4;
        int dummy5;
        int dummy6;
        int dummy7;
        int dummy8;
        int dummy9;
        int dummy10;
        int dummy11;
        int pad1;
        void *pad2;
        void *pad3;
    } DBusMessageIter;

    // Threading
    dbus_bool_t dbus_threads_init_default(void);

    // Connections
    DBusConnection *dbus_bus_get(DBusBusType type, DBusError *error);
    void dbus_connection_unref(DBusConnection *connection);
    void dbus_connection_flush(DBusConnection *connection);
    void dbus_connection_set_exit_on_disconnect(DBusConnection *connection,
                                                dbus_bool_t exit_on_disconnect);
    DBusMessage *dbus_connection_send_with_reply_and_block(
        DBusConnection *connection, DBusMessage *message,
        int timeout_milliseconds, DBusError *error);

    // Messages
    DBusMessage *dbus_message_new_method_call(const char *bus_name,
                                              const char *path,
                                              const char *iface,
                                              const char *method);
    void dbus_message_unref(DBusMessage *message);

    // Appending arguments
    void dbus_message_iter_init_append(DBusMessage *message,
                                       DBusMessageIter *iter);
    dbus_bool_t dbus_message_iter_append_basic(DBusMessageIter *iter,
                                               int type, const void *value);
    dbus_bool_t dbus_message_iter_open_container(DBusMessageIter *iter,
                                                 int type,
                                                 const char *contained_signature,
                                                 DBusMessageIter *sub);
    dbus_bool_t dbus_message_iter_close_container(DBusMessageIter *iter,
                                                  DBusMessageIter *sub);
    void dbus_message_iter_abandon_container(DBusMessageIter *iter,
                                             DBusMessageIter *sub);

    // Reading arguments
    dbus_bool_t dbus_message_iter_init(DBusMessage *message,
                                       DBusMessageIter *iter);
    int dbus_message_iter_get_arg_type(DBusMessageIter *iter);
    void dbus_message_iter_get_basic(DBusMessageIter *iter, void *value);
    dbus_bool_t dbus_message_iter_next(DBusMessageIter *iter);
    void dbus_message_iter_recurse(DBusMessageIter *iter, DBusMessageIter *sub);
    int dbus_message_iter_get_element_type(DBusMessageIter *iter);
""")

_lib = None
_lib_lock = threading.Lock()


class LibraryLoadError(OSError):
    """Exception raised when libdbus cannot be loaded or initialized."""

    pass


def get_lib():
    """
    Open libdbus and run its one-time thread-safety bootstrap.

    The library is opened on first use rather than at import time, so the
    rest of the package stays importable on hosts without libdbus. The
    bootstrap must happen before any connection is used from any thread,
    which is why it is tied to the load itself. Safe to call repeatedly and
    from several threads.

    Returns:
        The cffi library handle.

    Raises:
        LibraryLoadError: If the shared object is missing or the thread
                          bootstrap fails (libdbus is out of memory).
    """
    global _lib

    with _lib_lock:
        if _lib is None:
            try:
                lib = ffi.dlopen(LIBDBUS_NAME)
            except OSError as e:
                raise LibraryLoadError(f"Failed to load {LIBDBUS_NAME}: {e}") from e

            if not lib.dbus_threads_init_default():
                raise LibraryLoadError("dbus_threads_init_default() failed")

            _lib = lib

    return _lib
